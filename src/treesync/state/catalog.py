"""Persisted-store provider backed by the JSON catalog."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Collection, Iterable

from treesync import paths
from treesync.errors import StoreUnavailableError, StoreUpdateError

from .errors import StateError
from .models import CatalogState, DataEntry
from .repository import StateRepository

LOGGER = logging.getLogger(__name__)


class CatalogRecordStore:
    """Answer path queries and apply path rewrites against the catalog."""

    def __init__(self, root: Path, repository: StateRepository | None = None) -> None:
        self.root = root
        self.repository = repository or StateRepository()

    def get_known_relative_paths(self) -> list[str]:
        """Return the distinct relative paths that currently own data.

        Raises:
            StoreUnavailableError: If the catalog exists but cannot be read.
        """
        state = self._load(StoreUnavailableError)
        return sorted({entry.relative_path for entry in state.entries})

    def replace_path_prefix(
        self,
        old_prefix: str,
        new_prefix: str,
        is_interior_subtree: bool,
        *,
        only_files: Collection[str] | None = None,
    ) -> int:
        """Refile entries from ``old_prefix`` onto ``new_prefix``.

        Leaf mode rewrites entries filed exactly under ``old_prefix``. Interior
        mode additionally rewrites entries filed anywhere below it. The new
        catalog is saved in one atomic write, so either every matching entry
        changes or none does.

        Args:
            old_prefix: Relative path being renamed or moved.
            new_prefix: Relative path replacing it.
            is_interior_subtree: Whether entries below ``old_prefix`` move too.
            only_files: Optional file names restricting which entries change.

        Returns:
            int: Number of rewritten entries.

        Raises:
            StoreUpdateError: If the catalog cannot be read or written.
        """
        state = self._load(StoreUpdateError)
        names = {name.casefold() for name in only_files} if only_files is not None else None

        count = 0
        for entry in state.entries:
            if names is not None and entry.file_name.casefold() not in names:
                continue
            if paths.same_path(entry.relative_path, old_prefix):
                entry.relative_path = new_prefix
            elif is_interior_subtree and paths.is_ancestor(old_prefix, entry.relative_path):
                entry.relative_path = paths.replace_prefix(
                    entry.relative_path, old_prefix, new_prefix
                )
            else:
                continue
            count += 1

        if count:
            try:
                self.repository.save(self.root, state)
            except StateError as exc:
                raise StoreUpdateError(str(exc)) from exc
        LOGGER.info("Refiled %d catalog entries from %r to %r.", count, old_prefix, new_prefix)
        return count

    def register(self, relative_path: str, file_names: Iterable[str]) -> int:
        """Add catalog entries for files filed under ``relative_path``.

        Files already catalogued under the same path are skipped.

        Returns:
            int: Number of entries added.
        """
        state = self._load(StoreUpdateError)
        folder = paths.normalize(relative_path)
        known = {
            (paths.key(entry.relative_path), entry.file_name.casefold()) for entry in state.entries
        }
        added = 0
        for name in file_names:
            marker = (paths.key(folder), name.casefold())
            if marker in known:
                continue
            state.entries.append(DataEntry(file_name=name, relative_path=folder))
            known.add(marker)
            added += 1
        if added:
            try:
                self.repository.save(self.root, state)
            except StateError as exc:
                raise StoreUpdateError(str(exc)) from exc
        return added

    def _load(self, error_type: type[Exception]) -> CatalogState:
        if not self.repository.exists(self.root):
            return CatalogState(root=str(self.root))
        try:
            return self.repository.load(self.root)
        except StateError as exc:
            raise error_type(str(exc)) from exc


__all__ = ["CatalogRecordStore"]
