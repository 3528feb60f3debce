"""In-memory collaborators shared by the hierarchy and mutation tests."""

from __future__ import annotations

from typing import Collection, Iterable, Iterator

import pytest

from treesync import paths
from treesync.errors import FilesystemError, StoreUnavailableError, StoreUpdateError
from treesync.hierarchy import PathRecord, PathRecordStore
from treesync.mutation import MutationEngine


class FakeFilesystem:
    """Folder tree held in memory, keyed case-insensitively like the engine."""

    def __init__(self, folders: Iterable[str] = (), files: dict[str, list[str]] | None = None):
        self.folders: dict[str, str] = {"": ""}
        self.files: dict[str, list[str]] = {}
        for folder in folders:
            self.add_folder(folder)
        for folder, names in (files or {}).items():
            self.add_folder(folder)
            self.files[paths.key(folder)] = list(names)
        self.fail_on: set[str] = set()
        self.fail_file_moves_after: int | None = None
        self.file_moves = 0
        self.calls: list[tuple[str, ...]] = []

    def add_folder(self, path: str) -> None:
        current = ""
        for name in paths.split(path):
            current = paths.join(current, name)
            self.folders.setdefault(paths.key(current), current)

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise FilesystemError(f"{operation} failed")

    def exists(self, path: str) -> bool:
        return paths.key(path) in self.folders

    def entry_exists(self, path: str) -> bool:
        if self.exists(path):
            return True
        names = self.files.get(paths.key(paths.parent_of(path)), [])
        return any(paths.same_path(name, paths.name_of(path)) for name in names)

    def is_empty(self, path: str) -> bool:
        self._check("is_empty")
        if self.files.get(paths.key(path)):
            return False
        return not any(paths.is_ancestor(path, folder) for folder in self.folders.values())

    def enumerate_subfolders(self, excluding: Collection[str] = ()) -> Iterator[str]:
        self._check("enumerate_subfolders")
        for folder in sorted(self.folders.values()):
            if folder and not any(name in excluding for name in paths.split(folder)):
                yield folder

    def move_or_rename_folder(self, old_path: str, new_path: str) -> None:
        self.calls.append(("move_or_rename_folder", old_path, new_path))
        self._check("move_or_rename_folder")
        if not self.exists(old_path):
            raise FilesystemError(f"{old_path} does not exist")
        moved = {
            key: folder
            for key, folder in self.folders.items()
            if paths.same_path(folder, old_path) or paths.is_ancestor(old_path, folder)
        }
        for key in moved:
            del self.folders[key]
        for folder in moved.values():
            self.add_folder(paths.replace_prefix(folder, old_path, new_path))
        for key in list(self.files):
            folder = moved.get(key)
            if folder is not None:
                new_folder = paths.replace_prefix(folder, old_path, new_path)
                self.files[paths.key(new_folder)] = self.files.pop(key)

    def create_subfolder(self, parent: str, name: str) -> None:
        self.calls.append(("create_subfolder", parent, name))
        self._check("create_subfolder")
        target = paths.join(parent, name)
        if self.entry_exists(target):
            raise FilesystemError(f"{target} already exists")
        self.add_folder(target)

    def delete_empty_folder(self, path: str) -> None:
        self.calls.append(("delete_empty_folder", path))
        self._check("delete_empty_folder")
        self.folders.pop(paths.key(path), None)

    def enumerate_media_files(self, folder: str) -> list[str]:
        self._check("enumerate_media_files")
        return sorted(self.files.get(paths.key(folder), []))

    def move_file(self, old_path: str, new_path: str) -> None:
        self.calls.append(("move_file", old_path, new_path))
        if self.fail_file_moves_after is not None and self.file_moves >= self.fail_file_moves_after:
            raise FilesystemError(f"Unable to move {old_path}")
        self.file_moves += 1
        source_files = self.files[paths.key(paths.parent_of(old_path))]
        source_files.remove(paths.name_of(old_path))
        self.files.setdefault(paths.key(paths.parent_of(new_path)), []).append(
            paths.name_of(new_path)
        )


class FakeRecordStore:
    """Persisted store listing the paths that own data."""

    def __init__(self, known: Iterable[str] = ()) -> None:
        self.known: list[str] = list(known)
        self.replacements: list[tuple[str, str, bool, tuple[str, ...] | None]] = []
        self.fail_queries = False
        self.fail_updates = False

    def get_known_relative_paths(self) -> list[str]:
        if self.fail_queries:
            raise StoreUnavailableError("store offline")
        return list(self.known)

    def replace_path_prefix(
        self,
        old_prefix: str,
        new_prefix: str,
        is_interior_subtree: bool,
        *,
        only_files: Collection[str] | None = None,
    ) -> int:
        self.replacements.append(
            (
                old_prefix,
                new_prefix,
                is_interior_subtree,
                tuple(only_files) if only_files is not None else None,
            )
        )
        if self.fail_updates:
            raise StoreUpdateError("write failed")
        if only_files is not None:
            if new_prefix not in self.known:
                self.known.append(new_prefix)
            return len(only_files)
        count = 0
        for index, path in enumerate(self.known):
            if paths.same_path(path, old_prefix) or (
                is_interior_subtree and paths.is_ancestor(old_prefix, path)
            ):
                self.known[index] = paths.replace_prefix(path, old_prefix, new_prefix)
                count += 1
        return count


def make_store(*entries: str | tuple[str, bool]) -> PathRecordStore:
    """Build a store from paths or ``(path, has_data)`` pairs."""
    store = PathRecordStore()
    for entry in entries:
        if isinstance(entry, tuple):
            store.add(PathRecord(path=entry[0], has_data=entry[1]))
        else:
            store.add(PathRecord(path=entry))
    return store


@pytest.fixture
def filesystem() -> FakeFilesystem:
    return FakeFilesystem()


@pytest.fixture
def record_store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture
def make_engine():
    """Return a factory wiring an engine to the given store and fakes."""

    def _factory(
        store: PathRecordStore, filesystem: FakeFilesystem, record_store: FakeRecordStore
    ) -> MutationEngine:
        engine = MutationEngine(store, filesystem, record_store)
        engine.rebuild()
        return engine

    return _factory
