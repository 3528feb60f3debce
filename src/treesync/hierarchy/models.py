"""Data models for known folder paths and the derived folder tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict

from treesync import paths


class PathRecord(BaseModel):
    """A folder path known to the hierarchy.

    Attributes:
        path: Root-relative folder path; the empty string is the root.
        has_data: Whether the persisted store files data under exactly this path.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    has_data: bool = False


@dataclass(slots=True)
class Node:
    """One folder in a tree rebuilt from the known paths.

    Attributes:
        name: Folder name; empty for the root.
        path: Root-relative path formed by joining ancestor names.
        has_data: Whether the persisted store files data under this exact path.
        folder_exists: Whether the folder is physically present under the root.
        children: Child nodes keyed by folder name.
    """

    name: str = ""
    path: str = ""
    has_data: bool = False
    folder_exists: bool = False
    children: dict[str, "Node"] = field(default_factory=dict)

    @property
    def is_root(self) -> bool:
        return self.path == ""

    def walk(self) -> Iterator["Node"]:
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children.values():
            yield from child.walk()

    def child(self, name: str) -> Optional["Node"]:
        """Return the child called ``name``, matching case-insensitively."""
        match = self.children.get(name)
        if match is not None:
            return match
        return next(
            (child for key, child in self.children.items() if paths.same_path(key, name)),
            None,
        )

    def find(self, path: str) -> Optional["Node"]:
        """Return the node at ``path`` or None when the tree has no such folder."""
        current: Node = self
        for segment in paths.split(path):
            match = current.child(segment)
            if match is None:
                return None
            current = match
        return current

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "has_data": self.has_data,
            "folder_exists": self.folder_exists,
            "children": [child.to_dict() for child in self.children.values()],
        }


__all__ = ["PathRecord", "Node"]
