"""Validate and apply structural changes to the folder hierarchy.

Every operation follows the same sequence: validate against the in-memory
store without side effects, snapshot the store, commit the new store state,
perform the physical change, and then refile the affected data in the
persisted store. A failed physical change restores the snapshot. A failed
persisted-store update cannot be rolled back because the disk has already
changed, so it is reported as a divergence instead.
"""

from __future__ import annotations

import logging
from typing import Callable

from treesync import paths
from treesync.errors import FilesystemError, StoreUnavailableError, StoreUpdateError
from treesync.hierarchy import HierarchyBuilder, Node, PathRecord, PathRecordStore
from treesync.hierarchy.store import StoreSnapshot
from treesync.providers.protocols import FilesystemProvider, RecordStoreProvider

from .models import (
    CreateChildOperation,
    DeleteOperation,
    ExtractFilesOperation,
    MoveOperation,
    MutationOutcome,
    MutationResult,
    Operation,
    RenameOperation,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_NEW_FOLDER_NAME = "New folder"

RebuildListener = Callable[[Node], None]


class MutationEngine:
    """Apply rename, move, create, delete, and extract operations."""

    def __init__(
        self,
        store: PathRecordStore,
        filesystem: FilesystemProvider,
        record_store: RecordStoreProvider,
        *,
        builder: HierarchyBuilder | None = None,
        new_folder_name: str = DEFAULT_NEW_FOLDER_NAME,
        suffix_separator: str = "_",
    ) -> None:
        """Initialize the engine with its collaborators.

        Args:
            store: Live store of known paths, owned by the engine from here on.
            filesystem: Provider performing physical folder operations.
            record_store: Persisted store that files data under relative paths.
            builder: Optional tree builder; defaults to one over ``filesystem``.
            new_folder_name: Default name for created subfolders.
            suffix_separator: Separator placed before numeric collision suffixes.
        """
        self.store = store
        self._filesystem = filesystem
        self._record_store = record_store
        self._builder = builder or HierarchyBuilder(filesystem)
        self._new_folder_name = new_folder_name
        self._suffix_separator = suffix_separator
        self._listeners: list[RebuildListener] = []
        self.tree: Node | None = None
        self._handlers: dict[str, Callable[..., MutationResult]] = {
            "rename": self._rename,
            "move": self._move,
            "create_child": self._create_child,
            "delete": self._delete,
            "extract_files": self._extract_files,
        }

    def subscribe(self, listener: RebuildListener) -> None:
        """Register a callable receiving every rebuilt tree."""
        self._listeners.append(listener)

    def rebuild(self) -> Node:
        """Order the store, rebuild the tree, and notify listeners."""
        self.store.order_by_path()
        self.tree = self._builder.build(self.store.records())
        for listener in self._listeners:
            listener(self.tree)
        return self.tree

    def apply(self, operation: Operation) -> MutationResult:
        """Validate and execute a single operation.

        Args:
            operation: Operation variant to apply.

        Returns:
            MutationResult: Outcome of the operation.
        """
        handler = self._handlers.get(operation.kind)
        if handler is None:
            raise ValueError(f"Unsupported operation kind: {operation.kind}")

        result = handler(operation)
        if result.ok:
            LOGGER.info("%s applied: %s -> %s", result.kind, result.source, result.destination)
        elif result.outcome is MutationOutcome.VALIDATION_REJECTED:
            LOGGER.info("%s rejected: %s", result.kind, result.message)
        elif result.diverged:
            LOGGER.error("%s left the collection diverged: %s", result.kind, result.message)
        else:
            LOGGER.warning("%s failed: %s", result.kind, result.message)
        return result

    def rename(self, target_path: str, new_name: str) -> MutationResult:
        return self.apply(RenameOperation(target_path=target_path, new_name=new_name))

    def move(self, source_path: str, source_name: str, destination_path: str) -> MutationResult:
        return self.apply(
            MoveOperation(
                source_path=source_path,
                source_name=source_name,
                destination_path=destination_path,
            )
        )

    def create_child(self, parent_path: str, desired_name: str | None = None) -> MutationResult:
        return self.apply(CreateChildOperation(parent_path=parent_path, desired_name=desired_name))

    def delete(self, target_path: str) -> MutationResult:
        return self.apply(DeleteOperation(target_path=target_path))

    def extract_files(self, source_path: str) -> MutationResult:
        return self.apply(ExtractFilesOperation(source_path=source_path))

    # ------------------------------------------------------------------ #
    # Handlers                                                           #
    # ------------------------------------------------------------------ #

    def _rename(self, operation: RenameOperation) -> MutationResult:
        kind = operation.kind
        target = paths.normalize(operation.target_path)
        if not target:
            return self._reject(kind, "The root folder cannot be renamed.", source=target)
        record = self.store.get(target)
        if record is None:
            return self._reject(kind, f"Unknown folder: {target}", source=target)
        target = record.path

        try:
            name = paths.validate_folder_name(operation.new_name)
        except paths.InvalidFolderNameError as exc:
            return self._reject(kind, str(exc), source=target)

        new_path = paths.join(paths.parent_of(target), name)
        if new_path == target:
            return self._reject(kind, f"{target} is already named {name!r}.", source=target)
        collision = self._find_collision(new_path, moving=target)
        if collision is not None:
            return self._reject(
                kind,
                f"A path with that name already exists: {collision}",
                source=target,
                destination=new_path,
            )
        interior = self.store.is_interior(target)

        snapshot = self.store.snapshot()
        self.store.rewrite_prefix(target, new_path)
        failure = self._run_physical(
            snapshot, lambda: self._filesystem.move_or_rename_folder(target, new_path)
        )
        if failure is not None:
            return self._failed(kind, failure, source=target, destination=new_path)
        return self._refile(kind, target, new_path, interior)

    def _move(self, operation: MoveOperation) -> MutationResult:
        kind = operation.kind
        source = paths.normalize(operation.source_path)
        destination = paths.normalize(operation.destination_path)
        if not source:
            return self._reject(kind, "The root folder cannot be moved.", source=source)
        record = self.store.get(source)
        if record is None:
            return self._reject(kind, f"Unknown folder: {source}", source=source)
        source = record.path

        try:
            name = paths.validate_folder_name(operation.source_name)
        except paths.InvalidFolderNameError as exc:
            return self._reject(kind, str(exc), source=source)
        new_path = paths.join(destination, name)

        if paths.same_path(destination, paths.parent_of(source)):
            return self._reject(
                kind, f"{source} is already in that folder.", source=source, destination=new_path
            )
        if any(
            paths.same_path(paths.name_of(child.path), name)
            for child in self.store.children_of(destination)
        ):
            return self._reject(
                kind,
                f"The destination already contains a folder named {name!r}.",
                source=source,
                destination=new_path,
            )
        if paths.same_path(destination, source):
            return self._reject(
                kind, "A folder cannot be moved onto itself.", source=source, destination=new_path
            )
        if paths.is_ancestor(source, destination):
            return self._reject(
                kind,
                "A folder cannot be moved into one of its own subfolders.",
                source=source,
                destination=new_path,
            )
        if not self._filesystem.exists(destination):
            return self._reject(
                kind,
                f"The destination folder does not exist: {destination or '(root)'}",
                source=source,
                destination=new_path,
            )
        interior = self.store.is_interior(source)

        snapshot = self.store.snapshot()
        self.store.rewrite_prefix(source, new_path)
        parent = paths.parent_of(source)
        if parent not in self.store:
            self.store.add(PathRecord(path=parent))
        failure = self._run_physical(
            snapshot, lambda: self._filesystem.move_or_rename_folder(source, new_path)
        )
        if failure is not None:
            return self._failed(kind, failure, source=source, destination=new_path)
        return self._refile(kind, source, new_path, interior)

    def _create_child(self, operation: CreateChildOperation) -> MutationResult:
        kind = operation.kind
        parent = paths.normalize(operation.parent_path)
        parent_record = self.store.get(parent)
        if parent and parent_record is None:
            return self._reject(kind, f"Unknown folder: {parent}", source=parent)
        if parent_record is not None:
            parent = parent_record.path

        try:
            desired = paths.validate_folder_name(operation.desired_name or self._new_folder_name)
        except paths.InvalidFolderNameError as exc:
            return self._reject(kind, str(exc), source=parent)

        def _taken(candidate: str) -> bool:
            candidate_path = paths.join(parent, candidate)
            return candidate_path in self.store or self._filesystem.entry_exists(candidate_path)

        name = paths.unique_name(desired, _taken, separator=self._suffix_separator)
        new_path = paths.join(parent, name)
        if new_path in self.store:
            return self._reject(
                kind, f"A folder called {new_path} already exists.", source=parent
            )

        snapshot = self.store.snapshot()
        self.store.add(PathRecord(path=new_path))
        failure = self._run_physical(
            snapshot, lambda: self._filesystem.create_subfolder(parent, name)
        )
        if failure is not None:
            return self._failed(kind, failure, source=parent, destination=new_path)
        self.rebuild()
        return MutationResult(
            kind=kind,
            outcome=MutationOutcome.APPLIED,
            message=f"Created {new_path}.",
            source=parent,
            destination=new_path,
        )

    def _delete(self, operation: DeleteOperation) -> MutationResult:
        kind = operation.kind
        target = paths.normalize(operation.target_path)
        if not target:
            return self._reject(kind, "The root folder cannot be deleted.", source=target)
        record = self.store.get(target)
        if record is None:
            return self._reject(kind, f"Unknown folder: {target}", source=target)
        target = record.path

        if record.has_data:
            return self._reject(kind, f"{target} has data associated with it.", source=target)
        if self.store.descendants(target):
            return self._reject(kind, f"{target} contains other folders.", source=target)
        if not self._filesystem.exists(target):
            return self._reject(kind, f"{target} does not exist on disk.", source=target)
        try:
            empty = self._filesystem.is_empty(target)
        except FilesystemError as exc:
            return self._failed(kind, str(exc), source=target)
        if not empty:
            return self._reject(
                kind,
                f"Deletions are only allowed for empty folders; {target} has files or folders in it.",
                source=target,
            )

        snapshot = self.store.snapshot()
        self.store.remove(target)
        failure = self._run_physical(snapshot, lambda: self._filesystem.delete_empty_folder(target))
        if failure is not None:
            return self._failed(kind, failure, source=target)
        self.rebuild()
        return MutationResult(
            kind=kind,
            outcome=MutationOutcome.APPLIED,
            message=f"Deleted {target}.",
            source=target,
        )

    def _extract_files(self, operation: ExtractFilesOperation) -> MutationResult:
        kind = operation.kind
        source = paths.normalize(operation.source_path)
        record = self.store.get(source)
        if source and record is None:
            return self._reject(kind, f"Unknown folder: {source}", source=source)
        if record is not None:
            source = record.path
        if not self._filesystem.exists(source):
            return self._reject(kind, f"{source or '(root)'} does not exist on disk.", source=source)

        try:
            files = list(self._filesystem.enumerate_media_files(source))
        except FilesystemError as exc:
            return self._failed(kind, str(exc), source=source)
        if not files:
            return self._reject(kind, f"{source or '(root)'} has no media files.", source=source)

        created = self._create_child(CreateChildOperation(parent_path=source))
        if not created.ok or created.destination is None:
            return created.model_copy(update={"kind": kind})
        new_path = created.destination

        moved: list[str] = []
        move_error: Exception | None = None
        for file_name in files:
            try:
                self._filesystem.move_file(
                    paths.join(source, file_name), paths.join(new_path, file_name)
                )
            except (FilesystemError, OSError) as exc:
                move_error = exc
                break
            moved.append(file_name)

        store_error: Exception | None = None
        if moved:
            try:
                self._record_store.replace_path_prefix(source, new_path, False, only_files=moved)
            except (StoreUpdateError, StoreUnavailableError) as exc:
                store_error = exc
            else:
                remaining = len(files) - len(moved)
                self.store.set_has_data(new_path, True)
                self.store.set_has_data(source, self._still_owns_data(source, remaining))
        self.rebuild()

        counts = {"files_moved": len(moved), "files_total": len(files)}
        if store_error is not None:
            return MutationResult(
                kind=kind,
                outcome=MutationOutcome.PERSISTED_STORE_UPDATE_FAILED,
                message=(
                    f"{len(moved)} file(s) were moved into {new_path}, but their records "
                    f"could not be refiled: {store_error}. Manual reconciliation is required."
                ),
                source=source,
                destination=new_path,
                **counts,
            )
        if move_error is not None:
            return MutationResult(
                kind=kind,
                outcome=MutationOutcome.PARTIAL_FILE_MIGRATION,
                message=(
                    f"{len(moved)}/{len(files)} file(s) were moved into {new_path} before an "
                    f"error occurred: {move_error}"
                ),
                source=source,
                destination=new_path,
                **counts,
            )
        return MutationResult(
            kind=kind,
            outcome=MutationOutcome.APPLIED,
            message=f"Moved {len(moved)} file(s) into {new_path}.",
            source=source,
            destination=new_path,
            **counts,
        )

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _find_collision(self, new_path: str, *, moving: str) -> str | None:
        """Return a known path clashing with ``new_path``, ignoring ``moving`` and below."""
        for record in self.store.records():
            if paths.same_path(record.path, moving) or paths.is_ancestor(moving, record.path):
                continue
            if paths.same_path(record.path, new_path) or paths.is_ancestor(new_path, record.path):
                return record.path
        return None

    def _run_physical(self, snapshot: StoreSnapshot, action: Callable[[], None]) -> str | None:
        """Run a physical change, restoring ``snapshot`` when it fails.

        Returns:
            str | None: Failure description, or None when the change succeeded.
        """
        try:
            action()
        except (FilesystemError, OSError) as exc:
            self.store.restore(snapshot)
            self.rebuild()
            LOGGER.warning("Physical change failed; restored previous folder state: %s", exc)
            return str(exc)
        return None

    def _refile(self, kind: str, old_path: str, new_path: str, interior: bool) -> MutationResult:
        try:
            self._record_store.replace_path_prefix(old_path, new_path, interior)
        except (StoreUpdateError, StoreUnavailableError) as exc:
            self.rebuild()
            return MutationResult(
                kind=kind,
                outcome=MutationOutcome.PERSISTED_STORE_UPDATE_FAILED,
                message=(
                    f"{old_path} was moved to {new_path} on disk, but its records could not "
                    f"be refiled: {exc}. Manual reconciliation is required."
                ),
                source=old_path,
                destination=new_path,
                interior=interior,
            )
        self.rebuild()
        return MutationResult(
            kind=kind,
            outcome=MutationOutcome.APPLIED,
            message=f"Moved {old_path} to {new_path}.",
            source=old_path,
            destination=new_path,
            interior=interior,
        )

    def _still_owns_data(self, path: str, remaining: int) -> bool:
        try:
            known = self._record_store.get_known_relative_paths()
        except StoreUnavailableError:
            return remaining > 0 and self.store.has_data(path)
        return any(paths.same_path(known_path, path) for known_path in known)

    def _reject(
        self,
        kind: str,
        message: str,
        *,
        source: str | None = None,
        destination: str | None = None,
    ) -> MutationResult:
        return MutationResult(
            kind=kind,
            outcome=MutationOutcome.VALIDATION_REJECTED,
            message=message,
            source=source,
            destination=destination,
        )

    def _failed(
        self,
        kind: str,
        message: str,
        *,
        source: str | None = None,
        destination: str | None = None,
    ) -> MutationResult:
        return MutationResult(
            kind=kind,
            outcome=MutationOutcome.FILESYSTEM_OPERATION_FAILED,
            message=message,
            source=source,
            destination=destination,
        )


__all__ = ["MutationEngine", "DEFAULT_NEW_FOLDER_NAME", "RebuildListener"]
