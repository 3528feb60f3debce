"""Tests for the relative path helpers."""

from __future__ import annotations

import pytest

from treesync import paths


def test_normalize_accepts_backslashes_and_stray_separators() -> None:
    assert paths.normalize("\\Site1\\Cam2\\") == "Site1/Cam2"
    assert paths.normalize("//a///b/") == "a/b"
    assert paths.normalize("") == ""


def test_parent_and_name_of_nested_and_top_level_paths() -> None:
    assert paths.parent_of("a/b/c") == "a/b"
    assert paths.parent_of("a") == ""
    assert paths.parent_of("") == ""
    assert paths.name_of("a/b/c") == "c"
    assert paths.name_of("a") == "a"


def test_is_ancestor_is_strict_and_case_insensitive() -> None:
    assert paths.is_ancestor("Site1", "site1/cam")
    assert paths.is_ancestor("", "Site1")
    assert not paths.is_ancestor("Site1", "Site1")
    assert not paths.is_ancestor("", "")
    assert not paths.is_ancestor("Site", "Site1/cam")
    assert paths.is_descendant("a/b", "a")


def test_is_sibling_requires_distinct_paths_with_same_parent() -> None:
    assert paths.is_sibling("a/b", "A/c")
    assert paths.is_sibling("a", "b")
    assert not paths.is_sibling("a/b", "a/b")
    assert not paths.is_sibling("a/b", "c/b")


def test_replace_prefix_rewrites_exact_and_nested_paths_only() -> None:
    assert paths.replace_prefix("a/b", "a/b", "x") == "x"
    assert paths.replace_prefix("A/B/c", "a/b", "x/y") == "x/y/c"
    assert paths.replace_prefix("a/bc", "a/b", "x") == "a/bc"
    assert paths.replace_prefix("cam", "", "new") == "new/cam"


@pytest.mark.parametrize(
    "name",
    ["", "   ", "trailing.", "CON", "lpt1", "with/slash", "with\\slash", "what?", "a<b"],
)
def test_validate_folder_name_rejects_unusable_names(name: str) -> None:
    with pytest.raises(paths.InvalidFolderNameError):
        paths.validate_folder_name(name)


def test_validate_folder_name_trims_whitespace() -> None:
    assert paths.validate_folder_name("  Camera 3 ") == "Camera 3"
    assert paths.validate_folder_name("console") == "console"


def test_unique_name_appends_first_free_suffix() -> None:
    taken = {"New folder", "New folder_1"}

    assert paths.unique_name("New folder", taken.__contains__) == "New folder_2"
    assert paths.unique_name("Other", taken.__contains__) == "Other"
    assert paths.unique_name("New folder", taken.__contains__, separator=" ") == "New folder 1"
