"""Filesystem provider backed by the local disk."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Collection, Iterable, Iterator

from treesync import paths
from treesync.errors import FilesystemError

LOGGER = logging.getLogger(__name__)

DEFAULT_MEDIA_EXTENSIONS = (".jpg", ".jpeg", ".avi", ".mp4", ".asf", ".mov")


class LocalFilesystem:
    """Encapsulates folder mutations below a collection root."""

    def __init__(
        self,
        root: Path,
        *,
        media_extensions: Iterable[str] = DEFAULT_MEDIA_EXTENSIONS,
        ignored_prefixes: Iterable[str] = ("._",),
    ) -> None:
        self.root = root.expanduser().resolve()
        self.media_extensions = {extension.lower() for extension in media_extensions}
        self.ignored_prefixes = tuple(ignored_prefixes)

    def resolve(self, path: str) -> Path:
        """Return the absolute location of a root-relative path."""
        return self.root.joinpath(*paths.split(path))

    def exists(self, path: str) -> bool:
        return self.resolve(path).is_dir()

    def entry_exists(self, path: str) -> bool:
        """Return whether any file or folder occupies ``path``."""
        return self.resolve(path).exists()

    def is_empty(self, path: str) -> bool:
        target = self.resolve(path)
        try:
            with os.scandir(target) as entries:
                return next(entries, None) is None
        except OSError as exc:
            raise FilesystemError(f"Unable to inspect {target}: {exc}") from exc

    def enumerate_subfolders(self, excluding: Collection[str] = ()) -> Iterator[str]:
        """Yield the relative path of every folder below the root.

        Folders named in ``excluding`` are skipped together with their contents.

        Raises:
            FilesystemError: If the root folder cannot be read.
        """
        if not self.root.is_dir():
            raise FilesystemError(f"Root folder is missing: {self.root}")

        def _raise(error: OSError) -> None:
            raise error

        try:
            for current, dirnames, _ in os.walk(self.root, onerror=_raise):
                dirnames[:] = sorted(name for name in dirnames if name not in excluding)
                relative = Path(current).relative_to(self.root)
                for name in dirnames:
                    yield paths.join(*relative.parts, name)
        except OSError as exc:
            raise FilesystemError(f"Unable to enumerate folders under {self.root}: {exc}") from exc

    def move_or_rename_folder(self, old_path: str, new_path: str) -> None:
        source = self.resolve(old_path)
        destination = self.resolve(new_path)
        if not source.is_dir():
            raise FilesystemError(f"Source folder does not exist: {source}")
        if destination.exists() and not self._same_entry(source, destination):
            raise FilesystemError(f"Destination already exists: {destination}")
        if not destination.parent.is_dir():
            raise FilesystemError(f"Destination folder does not exist: {destination.parent}")
        try:
            source.rename(destination)
        except OSError as exc:
            raise FilesystemError(f"Unable to move {source} to {destination}: {exc}") from exc
        LOGGER.debug("Moved folder %s -> %s", source, destination)

    def create_subfolder(self, parent: str, name: str) -> None:
        parent_dir = self.resolve(parent)
        target = parent_dir / name
        if not parent_dir.is_dir():
            raise FilesystemError(f"Parent folder does not exist: {parent_dir}")
        if target.exists():
            raise FilesystemError(f"{target} already exists")
        try:
            target.mkdir()
        except OSError as exc:
            raise FilesystemError(f"Unable to create {target}: {exc}") from exc

    def delete_empty_folder(self, path: str) -> None:
        target = self.resolve(path)
        try:
            target.rmdir()
        except OSError as exc:
            raise FilesystemError(f"Unable to delete {target}: {exc}") from exc

    def enumerate_media_files(self, folder: str) -> list[str]:
        """Return the names of media files directly inside ``folder``."""
        directory = self.resolve(folder)
        try:
            candidates = sorted(directory.iterdir())
        except OSError as exc:
            raise FilesystemError(f"Unable to list {directory}: {exc}") from exc
        return [
            candidate.name
            for candidate in candidates
            if candidate.is_file()
            and candidate.suffix.lower() in self.media_extensions
            and not candidate.name.startswith(self.ignored_prefixes)
        ]

    def move_file(self, old_path: str, new_path: str) -> None:
        source = self.resolve(old_path)
        destination = self.resolve(new_path)
        if not source.is_file():
            raise FilesystemError(f"{source} does not exist")
        if destination.exists():
            raise FilesystemError(f"{destination} already exists")
        try:
            source.rename(destination)
        except OSError as exc:
            raise FilesystemError(f"Unable to move {source} to {destination}: {exc}") from exc

    def _same_entry(self, first: Path, second: Path) -> bool:
        try:
            return os.path.samefile(first, second)
        except OSError:
            return False


__all__ = ["LocalFilesystem", "DEFAULT_MEDIA_EXTENSIONS"]
