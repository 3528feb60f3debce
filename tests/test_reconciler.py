"""Tests for merging persisted and physical folder paths."""

from __future__ import annotations

import threading

import pytest
from conftest import FakeFilesystem, FakeRecordStore

from treesync import paths
from treesync.errors import ReconciliationCancelled, ReconciliationFailed
from treesync.hierarchy import Reconciler


def _records(store) -> dict[str, bool]:
    return {record.path: record.has_data for record in store}


def test_reconcile_adds_implied_ancestors_and_physical_folders() -> None:
    store = Reconciler().reconcile(["Site1/CamA", "Site2"], ["Site1", "Site1/CamB"])

    assert _records(store) == {
        "Site1/CamA": True,
        "Site2": True,
        "Site1": False,
        "": False,
        "Site1/CamB": False,
    }


def test_reconcile_never_downgrades_persisted_paths() -> None:
    store = Reconciler().reconcile(["a", "a/b"], ["a", "a/b", "A/B"])

    assert store.has_data("a")
    assert store.has_data("a/b")
    assert len(store) == 3


def test_reconcile_keeps_first_case_variant() -> None:
    store = Reconciler().reconcile(["Site1", "site1"], ["SITE1", "site1/cam"])

    assert [record.path for record in store] == ["Site1", "", "site1/cam"]
    assert [record.path for record in store.dropped] == ["site1"]


def test_reconcile_closes_every_record_under_ancestors() -> None:
    store = Reconciler().reconcile(["a/b/c/d"], ["x", "x/y"])

    for record in store:
        parent = record.path
        while parent:
            parent = paths.parent_of(parent)
            assert parent in store


def test_scan_reads_both_sources_with_exclusions() -> None:
    filesystem = FakeFilesystem(["Site1", "Backups/old", "Site1/DeletedFiles"])
    record_store = FakeRecordStore(["Site1"])

    store = Reconciler().scan(filesystem, record_store, excluding=["Backups", "DeletedFiles"])

    assert _records(store) == {"Site1": True, "": False}


def test_scan_honors_cancellation() -> None:
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(ReconciliationCancelled):
        Reconciler().scan(FakeFilesystem(["a"]), FakeRecordStore(), cancel=cancel)


def test_scan_reports_unreachable_sources() -> None:
    record_store = FakeRecordStore()
    record_store.fail_queries = True
    with pytest.raises(ReconciliationFailed):
        Reconciler().scan(FakeFilesystem(), record_store)

    filesystem = FakeFilesystem(["a"])
    filesystem.fail_on.add("enumerate_subfolders")
    with pytest.raises(ReconciliationFailed):
        Reconciler().scan(filesystem, FakeRecordStore())


def test_persisted_leaf_merges_with_physical_siblings() -> None:
    store = Reconciler().reconcile(["a/b"], ["a", "a/b", "a/c"])

    assert _records(store) == {"": False, "a": False, "a/b": True, "a/c": False}
