"""Configuration errors."""

from treesync.errors import TreesyncError


class ConfigError(TreesyncError):
    """Raised when a configuration file or override cannot be applied."""
