"""Catalog state errors."""

from treesync.errors import TreesyncError


class StateError(TreesyncError):
    """Base exception for catalog repository operations."""


class MissingStateError(StateError):
    """Raised when no catalog exists for a collection."""
