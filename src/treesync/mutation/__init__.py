"""Structural operations on the folder hierarchy."""

from .engine import DEFAULT_NEW_FOLDER_NAME, MutationEngine
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

__all__ = [
    "DEFAULT_NEW_FOLDER_NAME",
    "MutationEngine",
    "CreateChildOperation",
    "DeleteOperation",
    "ExtractFilesOperation",
    "MoveOperation",
    "MutationOutcome",
    "MutationResult",
    "Operation",
    "RenameOperation",
]
