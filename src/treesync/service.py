"""Working context that reconciles a collection and owns its engine."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from treesync.config import TreesyncConfig
from treesync.errors import SessionNotLoadedError
from treesync.hierarchy import HierarchyBuilder, Node, PathRecordStore, Reconciler
from treesync.mutation import MutationEngine
from treesync.mutation.engine import RebuildListener
from treesync.providers import FilesystemProvider, LocalFilesystem, RecordStoreProvider
from treesync.state import CatalogRecordStore

LOGGER = logging.getLogger(__name__)


class HierarchySession:
    """Reconcile a collection root and expose the mutation engine for it."""

    def __init__(
        self,
        root: Path,
        config: TreesyncConfig | None = None,
        *,
        filesystem: FilesystemProvider | None = None,
        record_store: RecordStoreProvider | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            root: Collection root folder.
            config: Loaded configuration; defaults are used when omitted.
            filesystem: Optional filesystem provider override.
            record_store: Optional persisted-store provider override.
        """
        self.root = root.expanduser().resolve()
        self.config = config or TreesyncConfig()
        scan = self.config.scan
        self.filesystem = filesystem or LocalFilesystem(
            self.root,
            media_extensions=scan.media_extensions,
            ignored_prefixes=scan.ignored_file_prefixes,
        )
        self.record_store = record_store or CatalogRecordStore(self.root)
        self._reconciler = Reconciler()
        self._engine: MutationEngine | None = None
        self._listeners: list[RebuildListener] = []

    def subscribe(self, listener: RebuildListener) -> None:
        """Register a callable receiving every rebuilt tree, across reloads."""
        self._listeners.append(listener)
        if self._engine is not None:
            self._engine.subscribe(listener)

    @property
    def loaded(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> MutationEngine:
        if self._engine is None:
            raise SessionNotLoadedError("The collection has not been loaded yet.")
        return self._engine

    @property
    def store(self) -> PathRecordStore:
        return self.engine.store

    def load(self, cancel: threading.Event | None = None) -> Node:
        """Reconcile the collection and build its tree.

        A cancelled or failed scan leaves any previously loaded store in place.

        Args:
            cancel: Optional event that aborts the scan when set.

        Returns:
            Node: Root of the freshly built tree.

        Raises:
            ReconciliationCancelled: If the scan was cancelled.
            ReconciliationFailed: If either source could not be enumerated.
        """
        store = self._reconciler.scan(
            self.filesystem,
            self.record_store,
            excluding=self.config.scan.excluded_folders,
            cancel=cancel,
        )
        if self.config.reconcile.warn_on_case_duplicates:
            for record in store.dropped:
                LOGGER.warning(
                    "Ignored folder %r: it differs from a known folder only by case.", record.path
                )

        engine = MutationEngine(
            store,
            self.filesystem,
            self.record_store,
            builder=HierarchyBuilder(self.filesystem),
            new_folder_name=self.config.naming.new_folder_name,
            suffix_separator=self.config.naming.suffix_separator,
        )
        for listener in self._listeners:
            engine.subscribe(listener)
        self._engine = engine
        return engine.rebuild()

    def close(self) -> None:
        """Discard the loaded store and engine."""
        self._engine = None


__all__ = ["HierarchySession"]
