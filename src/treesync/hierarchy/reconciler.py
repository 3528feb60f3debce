"""Merge persisted, implied, and physical folder paths into one store."""

from __future__ import annotations

import logging
import threading
from typing import Collection, Iterable

from treesync import paths
from treesync.errors import (
    FilesystemError,
    ReconciliationCancelled,
    ReconciliationFailed,
    StoreUnavailableError,
)
from treesync.providers.protocols import FilesystemProvider, RecordStoreProvider

from .models import PathRecord
from .store import PathRecordStore

LOGGER = logging.getLogger(__name__)


class Reconciler:
    """Produce a consistent path store from the persisted store and the disk."""

    def reconcile(
        self,
        persisted_paths: Iterable[str],
        physical_folders: Iterable[str],
    ) -> PathRecordStore:
        """Merge the known path sources into a new store.

        Args:
            persisted_paths: Paths that currently own data in the persisted store.
            physical_folders: Relative paths of the folders present on disk.

        Returns:
            PathRecordStore: Store containing every persisted path (with data),
            each of their ancestors, every physical folder, and the root.
        """
        store = PathRecordStore()
        seeded: list[PathRecord] = []
        for raw in persisted_paths:
            record = PathRecord(path=paths.normalize(raw), has_data=True)
            if store.add(record):
                seeded.append(record)

        for record in seeded:
            parent = record.path
            while parent:
                parent = paths.parent_of(parent)
                if parent not in store:
                    store.add(PathRecord(path=parent))

        if "" not in store:
            store.add(PathRecord(path=""))

        for folder in physical_folders:
            path = paths.normalize(folder)
            if path not in store:
                store.add(PathRecord(path=path))

        return store

    def scan(
        self,
        filesystem: FilesystemProvider,
        record_store: RecordStoreProvider,
        *,
        excluding: Collection[str] = (),
        cancel: threading.Event | None = None,
    ) -> PathRecordStore:
        """Enumerate both sources and reconcile them.

        Args:
            filesystem: Provider enumerating the physical folders.
            record_store: Provider listing the paths that own data.
            excluding: Folder names skipped during enumeration.
            cancel: Optional event; setting it aborts the scan.

        Returns:
            PathRecordStore: Reconciled store.

        Raises:
            ReconciliationCancelled: If ``cancel`` was set before the scan finished.
            ReconciliationFailed: If either source could not be enumerated.
        """
        self._check_cancelled(cancel)
        try:
            persisted = list(record_store.get_known_relative_paths())
        except StoreUnavailableError as exc:
            raise ReconciliationFailed(f"Unable to query known paths: {exc}") from exc

        physical: list[str] = []
        try:
            for folder in filesystem.enumerate_subfolders(excluding):
                self._check_cancelled(cancel)
                physical.append(folder)
        except (FilesystemError, OSError) as exc:
            raise ReconciliationFailed(f"Unable to enumerate folders: {exc}") from exc
        self._check_cancelled(cancel)

        store = self.reconcile(persisted, physical)
        LOGGER.info(
            "Reconciled %d persisted and %d physical folders into %d records.",
            len(persisted),
            len(physical),
            len(store),
        )
        return store

    def _check_cancelled(self, cancel: threading.Event | None) -> None:
        if cancel is not None and cancel.is_set():
            raise ReconciliationCancelled("Folder scan was cancelled.")


__all__ = ["Reconciler"]
