"""Contracts for the collaborators consumed by the hierarchy engine."""

from __future__ import annotations

from typing import Collection, Iterable, Protocol, Sequence


class FilesystemProvider(Protocol):
    """Physical folder operations addressed by root-relative paths.

    Every mutating method raises ``FilesystemError`` instead of partially
    applying a change.
    """

    def exists(self, path: str) -> bool: ...

    def entry_exists(self, path: str) -> bool: ...

    def is_empty(self, path: str) -> bool: ...

    def enumerate_subfolders(self, excluding: Collection[str] = ()) -> Iterable[str]: ...

    def move_or_rename_folder(self, old_path: str, new_path: str) -> None: ...

    def create_subfolder(self, parent: str, name: str) -> None: ...

    def delete_empty_folder(self, path: str) -> None: ...

    def enumerate_media_files(self, folder: str) -> Sequence[str]: ...

    def move_file(self, old_path: str, new_path: str) -> None: ...


class RecordStoreProvider(Protocol):
    """The persisted store that files data records under relative paths."""

    def get_known_relative_paths(self) -> Sequence[str]: ...

    def replace_path_prefix(
        self,
        old_prefix: str,
        new_prefix: str,
        is_interior_subtree: bool,
        *,
        only_files: Collection[str] | None = None,
    ) -> int: ...


__all__ = ["FilesystemProvider", "RecordStoreProvider"]
