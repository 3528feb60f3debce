"""Ordered, case-insensitively unique collection of known folder paths."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from treesync import paths

from .models import PathRecord

LOGGER = logging.getLogger(__name__)

StoreSnapshot = tuple[PathRecord, ...]


class PathRecordStore:
    """Hold the folder paths known to the hierarchy.

    Records are immutable, so a snapshot is a tuple of the current records and
    restoring one simply rebuilds the index from it.
    """

    def __init__(self, records: Iterable[PathRecord] = ()) -> None:
        self._records: dict[str, PathRecord] = {}
        self.dropped: list[PathRecord] = []
        for record in records:
            self.add(record)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[PathRecord]:
        return iter(list(self._records.values()))

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and paths.key(path) in self._records

    def add(self, record: PathRecord) -> bool:
        """Insert ``record`` unless a case-insensitively equal path is already known.

        The first record inserted for a path is retained. A later record whose
        spelling differs only by case is recorded in ``dropped`` and logged.

        Args:
            record: Record to insert.

        Returns:
            bool: True when the record was inserted.
        """
        path_key = paths.key(record.path)
        existing = self._records.get(path_key)
        if existing is None:
            self._records[path_key] = record
            return True
        if existing.path != record.path:
            self.dropped.append(record)
            LOGGER.debug(
                "Ignoring folder %r because it differs only by case from %r.",
                record.path,
                existing.path,
            )
        return False

    def add_or_replace(self, record: PathRecord) -> None:
        """Insert ``record``, replacing any record for the same path in place."""
        self._records[paths.key(record.path)] = record

    def remove(self, path: str) -> bool:
        return self._records.pop(paths.key(path), None) is not None

    def get(self, path: str) -> PathRecord | None:
        return self._records.get(paths.key(path))

    def records(self) -> list[PathRecord]:
        return list(self._records.values())

    def has_data(self, path: str) -> bool:
        record = self.get(path)
        return record is not None and record.has_data

    def set_has_data(self, path: str, has_data: bool) -> None:
        """Set the data flag of ``path``, inserting the record when it is unknown."""
        existing = self.get(path)
        resolved = existing.path if existing is not None else path
        self.add_or_replace(PathRecord(path=resolved, has_data=has_data))

    def is_interior(self, path: str) -> bool:
        """Return whether any known path lies strictly below ``path``."""
        return any(paths.is_ancestor(path, record.path) for record in self._records.values())

    def descendants(self, path: str) -> list[PathRecord]:
        return [record for record in self._records.values() if paths.is_ancestor(path, record.path)]

    def children_of(self, path: str) -> list[PathRecord]:
        """Return the records whose parent is ``path``."""
        return [
            record
            for record in self._records.values()
            if record.path and paths.same_path(paths.parent_of(record.path), path)
        ]

    def rewrite_prefix(self, old_prefix: str, new_prefix: str) -> int:
        """Rewrite every record equal to or below ``old_prefix`` onto ``new_prefix``.

        Unaffected records keep their position; rewritten records keep theirs too.

        Returns:
            int: Number of rewritten records.
        """
        rewritten: dict[str, PathRecord] = {}
        count = 0
        for record in self._records.values():
            if paths.same_path(record.path, old_prefix) or paths.is_ancestor(
                old_prefix, record.path
            ):
                record = PathRecord(
                    path=paths.replace_prefix(record.path, old_prefix, new_prefix),
                    has_data=record.has_data,
                )
                count += 1
            rewritten.setdefault(paths.key(record.path), record)
        self._records = rewritten
        return count

    def order_by_path(self) -> None:
        """Sort records by path using ordinal, case-sensitive comparison."""
        ordered = sorted(self._records.items(), key=lambda item: item[1].path)
        self._records = dict(ordered)

    def snapshot(self) -> StoreSnapshot:
        return tuple(self._records.values())

    def restore(self, snapshot: StoreSnapshot) -> None:
        self._records = {paths.key(record.path): record for record in snapshot}


__all__ = ["PathRecordStore", "StoreSnapshot"]
