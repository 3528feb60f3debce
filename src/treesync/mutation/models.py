"""Structural operations and their results."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class RenameOperation(BaseModel):
    """Rename a folder in place.

    Attributes:
        target_path: Relative path of the folder to rename.
        new_name: Replacement for the final path segment.
    """

    kind: Literal["rename"] = "rename"
    target_path: str
    new_name: str


class MoveOperation(BaseModel):
    """Move a folder, with everything below it, into another folder.

    Attributes:
        source_path: Relative path of the folder being moved.
        source_name: Folder name kept at the destination.
        destination_path: Relative path of the receiving folder.
    """

    kind: Literal["move"] = "move"
    source_path: str
    source_name: str
    destination_path: str


class CreateChildOperation(BaseModel):
    """Create a new, empty subfolder.

    Attributes:
        parent_path: Relative path of the folder receiving the subfolder.
        desired_name: Preferred name; a numeric suffix is added on collisions.
    """

    kind: Literal["create_child"] = "create_child"
    parent_path: str
    desired_name: Optional[str] = None


class DeleteOperation(BaseModel):
    """Delete an empty folder that owns no data."""

    kind: Literal["delete"] = "delete"
    target_path: str


class ExtractFilesOperation(BaseModel):
    """Move the media files of a folder into a newly created subfolder."""

    kind: Literal["extract_files"] = "extract_files"
    source_path: str


Operation = Annotated[
    Union[
        RenameOperation,
        MoveOperation,
        CreateChildOperation,
        DeleteOperation,
        ExtractFilesOperation,
    ],
    Field(discriminator="kind"),
]


class MutationOutcome(str, Enum):
    """How a structural operation ended."""

    APPLIED = "applied"
    VALIDATION_REJECTED = "validation_rejected"
    FILESYSTEM_OPERATION_FAILED = "filesystem_operation_failed"
    PERSISTED_STORE_UPDATE_FAILED = "persisted_store_update_failed"
    PARTIAL_FILE_MIGRATION = "partial_file_migration"


class MutationResult(BaseModel):
    """Outcome of applying an operation.

    Attributes:
        kind: Operation kind that produced the result.
        outcome: How the operation ended.
        message: Human-readable explanation.
        source: Relative path the operation acted on.
        destination: Relative path produced by the operation, if any.
        interior: Whether the persisted store was updated as a subtree.
        files_moved: Files moved by an extract operation.
        files_total: Files an extract operation attempted to move.
    """

    kind: str
    outcome: MutationOutcome
    message: str = ""
    source: Optional[str] = None
    destination: Optional[str] = None
    interior: bool = False
    files_moved: int = 0
    files_total: int = 0

    @property
    def ok(self) -> bool:
        return self.outcome is MutationOutcome.APPLIED

    @property
    def diverged(self) -> bool:
        """Whether memory, disk, and the persisted store may now disagree."""
        return self.outcome in (
            MutationOutcome.PERSISTED_STORE_UPDATE_FAILED,
            MutationOutcome.PARTIAL_FILE_MIGRATION,
        )


__all__ = [
    "RenameOperation",
    "MoveOperation",
    "CreateChildOperation",
    "DeleteOperation",
    "ExtractFilesOperation",
    "Operation",
    "MutationOutcome",
    "MutationResult",
]
