"""Collaborator contracts and their local implementations."""

from .local import DEFAULT_MEDIA_EXTENSIONS, LocalFilesystem
from .protocols import FilesystemProvider, RecordStoreProvider

__all__ = [
    "DEFAULT_MEDIA_EXTENSIONS",
    "FilesystemProvider",
    "LocalFilesystem",
    "RecordStoreProvider",
]
