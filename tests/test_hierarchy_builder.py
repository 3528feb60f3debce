"""Tests for building folder trees from path records."""

from __future__ import annotations

from conftest import FakeFilesystem, make_store

from treesync.hierarchy import HierarchyBuilder


def test_build_creates_intermediate_nodes_without_data() -> None:
    filesystem = FakeFilesystem(["a/b/c"])
    store = make_store(("a/b/c", True))

    root = HierarchyBuilder(filesystem).build(store.records())

    node = root.find("a/b/c")
    assert node is not None and node.has_data
    intermediate = root.find("a/b")
    assert intermediate is not None and not intermediate.has_data
    assert root.find("a") is not None and not root.find("a").has_data


def test_build_marks_only_exact_records_with_data() -> None:
    filesystem = FakeFilesystem(["a/b"])
    store = make_store("", ("a", False), ("a/b", True), ("a", True))

    root = HierarchyBuilder(filesystem).build(store.records())

    assert not root.find("a").has_data
    assert root.find("a/b").has_data


def test_build_sets_folder_existence_from_filesystem() -> None:
    filesystem = FakeFilesystem(["present"])
    store = make_store("", "present", ("missing", True))

    root = HierarchyBuilder(filesystem).build(store.records())

    assert root.folder_exists
    assert root.find("present").folder_exists
    assert not root.find("missing").folder_exists


def test_root_data_flag_and_explicit_root_existence() -> None:
    store = make_store(("", True), "a")

    root = HierarchyBuilder(FakeFilesystem()).build(store.records(), root_folder_exists=False)

    assert root.is_root
    assert root.has_data
    assert not root.folder_exists


def test_rebuilding_reflects_new_records_only() -> None:
    filesystem = FakeFilesystem(["a", "b"])
    builder = HierarchyBuilder(filesystem)
    store = make_store("", "a")
    first = builder.build(store.records())

    store.rewrite_prefix("a", "b")
    second = builder.build(store.records())

    assert first.find("a") is not None
    assert second.find("a") is None
    assert [node.path for node in second.walk()] == ["", "b"]


def test_to_dict_serializes_nested_children() -> None:
    store = make_store("", ("a/b", True))

    data = HierarchyBuilder(FakeFilesystem(["a/b"])).build(store.records()).to_dict()

    assert data["path"] == ""
    assert data["children"][0]["name"] == "a"
    assert data["children"][0]["children"][0] == {
        "name": "b",
        "path": "a/b",
        "has_data": True,
        "folder_exists": True,
        "children": [],
    }


def test_build_twice_on_unchanged_store_yields_equal_fresh_trees() -> None:
    filesystem = FakeFilesystem(["a/b", "x"])
    store = make_store("", ("a/b", True), ("gone/c", True), "x")
    builder = HierarchyBuilder(filesystem)

    first = builder.build(store.records())
    second = builder.build(store.records())

    def _summary(root):
        return {(node.path, node.has_data, node.folder_exists) for node in root.walk()}

    assert _summary(first) == _summary(second)
    assert ("a", False, True) in _summary(first)
    assert ("gone", False, False) in _summary(first)
    assert ("gone/c", True, False) in _summary(first)
    assert not {id(node) for node in first.walk()} & {id(node) for node in second.walk()}


def test_build_merges_case_variant_segments_into_one_node() -> None:
    store = make_store(("A", True), ("a/b", True))

    root = HierarchyBuilder(FakeFilesystem(["A/b"])).build(store.records())

    assert list(root.children) == ["A"]
    node = root.find("a/b")
    assert node is not None
    assert node.path == "A/b"
    assert root.children["A"].has_data
