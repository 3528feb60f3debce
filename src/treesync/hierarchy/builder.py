"""Build the folder tree from the known paths."""

from __future__ import annotations

from typing import Iterable

from treesync import paths
from treesync.providers.protocols import FilesystemProvider

from .models import Node, PathRecord


class HierarchyBuilder:
    """Convert a flat sequence of path records into a rooted tree of nodes."""

    def __init__(self, filesystem: FilesystemProvider) -> None:
        self._filesystem = filesystem

    def build(
        self,
        records: Iterable[PathRecord],
        root_folder_exists: bool | None = None,
    ) -> Node:
        """Return a fresh tree mirroring ``records``.

        Each record contributes one node per path segment. Only the node whose
        path equals the record's path takes the record's data flag, so
        intermediate folders are marked only by their own records.

        Args:
            records: Path records, normally already ordered by path.
            root_folder_exists: Existence of the root folder; queried from the
                filesystem provider when omitted.

        Returns:
            Node: Root node of the rebuilt tree.
        """
        if root_folder_exists is None:
            root_folder_exists = self._filesystem.exists("")
        root = Node(folder_exists=root_folder_exists)

        for record in records:
            if not record.path:
                root.has_data = record.has_data
                continue
            current = root
            for name in paths.split(record.path):
                child = current.child(name)
                if child is None:
                    child = Node(name=name, path=paths.join(current.path, name))
                    current.children[name] = child
                current = child
            current.has_data = record.has_data

        for node in root.walk():
            if not node.is_root:
                node.folder_exists = self._filesystem.exists(node.path)
        return root


__all__ = ["HierarchyBuilder"]
