"""Exceptions shared across the treesync packages."""


class TreesyncError(Exception):
    """Base exception for treesync failures."""


class FilesystemError(TreesyncError):
    """Raised when a physical folder or file operation cannot be performed."""


class StoreUnavailableError(TreesyncError):
    """Raised when the persisted store cannot be queried."""


class StoreUpdateError(TreesyncError):
    """Raised when the persisted store could not apply a path rewrite."""


class ReconciliationError(TreesyncError):
    """Base exception for failures while reconciling the known paths."""


class ReconciliationCancelled(ReconciliationError):
    """Raised when a caller cancels an in-flight reconciliation scan."""


class ReconciliationFailed(ReconciliationError):
    """Raised when reconciliation inputs could not be enumerated."""


class SessionNotLoadedError(TreesyncError):
    """Raised when a session is used before a successful load."""


__all__ = [
    "TreesyncError",
    "FilesystemError",
    "StoreUnavailableError",
    "StoreUpdateError",
    "ReconciliationError",
    "ReconciliationCancelled",
    "ReconciliationFailed",
    "SessionNotLoadedError",
]
