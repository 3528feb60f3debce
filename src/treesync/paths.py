"""Helpers for root-relative folder paths.

Relative paths are strings of folder names joined by ``SEPARATOR``. The empty
string denotes the root folder. Comparisons are case-insensitive.
"""

from __future__ import annotations

import re
from typing import Callable

SEPARATOR = "/"

RESERVED_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{index}" for index in range(10)]
    + [f"LPT{index}" for index in range(10)]
)

_INVALID_NAME_CHARACTERS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


class InvalidFolderNameError(ValueError):
    """Raised when a folder name cannot be used on disk."""


def normalize(path: str) -> str:
    """Return the canonical form of a relative path.

    Backslashes are treated as separators, and empty segments (including
    leading and trailing separators) are dropped.

    Args:
        path: Relative path in any supported spelling.

    Returns:
        str: Canonical relative path.
    """
    return SEPARATOR.join(split(path))


def split(path: str) -> list[str]:
    """Split a relative path into its folder names."""
    return [segment for segment in path.replace("\\", SEPARATOR).split(SEPARATOR) if segment]


def join(*parts: str) -> str:
    """Join relative path fragments, ignoring empty ones."""
    segments: list[str] = []
    for part in parts:
        segments.extend(split(part))
    return SEPARATOR.join(segments)


def parent_of(path: str) -> str:
    """Return the parent of a relative path; the root's parent is the root."""
    index = path.rfind(SEPARATOR)
    if index < 0:
        return ""
    return path[:index]


def name_of(path: str) -> str:
    """Return the final folder name of a relative path."""
    return path[path.rfind(SEPARATOR) + 1 :]


def key(path: str) -> str:
    """Return the case-insensitive comparison key for a path."""
    return path.casefold()


def same_path(first: str, second: str) -> bool:
    return key(first) == key(second)


def is_ancestor(ancestor: str, path: str) -> bool:
    """Return whether ``ancestor`` strictly contains ``path``.

    The root is an ancestor of every non-root path.
    """
    if not path or same_path(ancestor, path):
        return False
    if not ancestor:
        return True
    return key(path).startswith(key(ancestor) + SEPARATOR)


def is_descendant(path: str, ancestor: str) -> bool:
    return is_ancestor(ancestor, path)


def is_sibling(first: str, second: str) -> bool:
    """Return whether two distinct paths share the same parent."""
    if not first or not second or same_path(first, second):
        return False
    return same_path(parent_of(first), parent_of(second))


def replace_prefix(path: str, old_prefix: str, new_prefix: str) -> str:
    """Substitute ``old_prefix`` with ``new_prefix`` at the start of ``path``.

    Paths that are neither equal to nor below ``old_prefix`` are returned as-is.
    """
    if same_path(path, old_prefix):
        return new_prefix
    if not is_ancestor(old_prefix, path):
        return path
    remainder = path[len(old_prefix) + 1 :] if old_prefix else path
    return join(new_prefix, remainder)


def validate_folder_name(name: str) -> str:
    """Check a proposed folder name and return it stripped of whitespace.

    Args:
        name: Candidate folder name.

    Returns:
        str: The trimmed folder name.

    Raises:
        InvalidFolderNameError: If the name is empty, ends with a period, is a
            reserved device name, or contains characters disallowed in file names.
    """
    trimmed = name.strip()
    if not trimmed:
        raise InvalidFolderNameError("Folder names cannot be empty.")
    if trimmed.endswith("."):
        raise InvalidFolderNameError(f"Folder names cannot end with a period: {trimmed!r}")
    if trimmed.upper() in RESERVED_NAMES:
        raise InvalidFolderNameError(f"{trimmed!r} is a reserved device name.")
    match = _INVALID_NAME_CHARACTERS.search(trimmed)
    if match is not None:
        raise InvalidFolderNameError(
            f"Folder name {trimmed!r} contains the invalid character {match.group()!r}."
        )
    return trimmed


def unique_name(desired: str, is_taken: Callable[[str], bool], *, separator: str = "_") -> str:
    """Return ``desired`` or the first ``desired<separator>N`` that is not taken."""
    candidate = desired
    counter = 0
    while is_taken(candidate):
        counter += 1
        candidate = f"{desired}{separator}{counter}"
    return candidate


__all__ = [
    "SEPARATOR",
    "RESERVED_NAMES",
    "InvalidFolderNameError",
    "normalize",
    "split",
    "join",
    "parent_of",
    "name_of",
    "key",
    "same_path",
    "is_ancestor",
    "is_descendant",
    "is_sibling",
    "replace_prefix",
    "validate_folder_name",
    "unique_name",
]
