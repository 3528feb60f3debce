"""Tests for the local disk filesystem provider."""

from __future__ import annotations

from pathlib import Path

import pytest

from treesync.errors import FilesystemError
from treesync.hierarchy import PathRecord, PathRecordStore
from treesync.mutation import MutationEngine
from treesync.providers import LocalFilesystem
from treesync.state import CatalogRecordStore


def _tree(tmp_path: Path) -> LocalFilesystem:
    for folder in ["Site1/CamA", "Site1/CamB", "Site2", "Backups/old", ".treesync"]:
        (tmp_path / folder).mkdir(parents=True)
    (tmp_path / "Site1" / "CamA" / "IMG_1.JPG").write_text("a", encoding="utf-8")
    (tmp_path / "Site1" / "CamA" / "clip.mp4").write_text("b", encoding="utf-8")
    (tmp_path / "Site1" / "CamA" / "._IMG_1.JPG").write_text("c", encoding="utf-8")
    (tmp_path / "Site1" / "CamA" / "notes.txt").write_text("d", encoding="utf-8")
    return LocalFilesystem(tmp_path)


def test_enumerate_subfolders_prunes_excluded_names(tmp_path: Path) -> None:
    filesystem = _tree(tmp_path)

    folders = list(filesystem.enumerate_subfolders(["Backups", ".treesync"]))

    assert folders == ["Site1", "Site2", "Site1/CamA", "Site1/CamB"]


def test_enumerate_subfolders_requires_root(tmp_path: Path) -> None:
    filesystem = LocalFilesystem(tmp_path / "missing")

    with pytest.raises(FilesystemError):
        list(filesystem.enumerate_subfolders())


def test_enumerate_media_files_filters_extensions_and_prefixes(tmp_path: Path) -> None:
    filesystem = _tree(tmp_path)

    assert filesystem.enumerate_media_files("Site1/CamA") == ["IMG_1.JPG", "clip.mp4"]


def test_exists_and_is_empty(tmp_path: Path) -> None:
    filesystem = _tree(tmp_path)

    assert filesystem.exists("")
    assert filesystem.exists("Site1\\CamB")
    assert not filesystem.exists("Site1/CamA/IMG_1.JPG")
    assert filesystem.is_empty("Site1/CamB")
    assert not filesystem.is_empty("Site1/CamA")


def test_move_or_rename_folder_moves_contents(tmp_path: Path) -> None:
    filesystem = _tree(tmp_path)

    filesystem.move_or_rename_folder("Site1/CamA", "Site2/CamA")

    assert (tmp_path / "Site2" / "CamA" / "IMG_1.JPG").exists()
    assert not (tmp_path / "Site1" / "CamA").exists()


def test_move_or_rename_folder_refuses_existing_destination(tmp_path: Path) -> None:
    filesystem = _tree(tmp_path)

    with pytest.raises(FilesystemError):
        filesystem.move_or_rename_folder("Site1/CamA", "Site1/CamB")
    with pytest.raises(FilesystemError):
        filesystem.move_or_rename_folder("Site1/Missing", "Site2/Missing")
    with pytest.raises(FilesystemError):
        filesystem.move_or_rename_folder("Site2", "Nowhere/Site2")


def test_create_and_delete_subfolder(tmp_path: Path) -> None:
    filesystem = _tree(tmp_path)

    filesystem.create_subfolder("Site2", "CamC")
    assert (tmp_path / "Site2" / "CamC").is_dir()
    with pytest.raises(FilesystemError):
        filesystem.create_subfolder("Site2", "CamC")

    filesystem.delete_empty_folder("Site2/CamC")
    assert not (tmp_path / "Site2" / "CamC").exists()
    with pytest.raises(FilesystemError):
        filesystem.delete_empty_folder("Site1/CamA")


def test_move_file_never_overwrites(tmp_path: Path) -> None:
    filesystem = _tree(tmp_path)
    (tmp_path / "Site2" / "clip.mp4").write_text("existing", encoding="utf-8")

    filesystem.move_file("Site1/CamA/IMG_1.JPG", "Site2/IMG_1.JPG")

    assert (tmp_path / "Site2" / "IMG_1.JPG").exists()
    with pytest.raises(FilesystemError):
        filesystem.move_file("Site1/CamA/clip.mp4", "Site2/clip.mp4")
    assert (tmp_path / "Site2" / "clip.mp4").read_text(encoding="utf-8") == "existing"


def test_entry_exists_sees_files_and_folders(tmp_path: Path) -> None:
    filesystem = _tree(tmp_path)

    assert filesystem.entry_exists("Site1/CamA/notes.txt")
    assert filesystem.entry_exists("Site1/CamB")
    assert not filesystem.entry_exists("Site1/CamC")


def test_engine_names_new_folder_around_existing_file(tmp_path: Path) -> None:
    filesystem = _tree(tmp_path)
    (tmp_path / "Site2" / "New folder").write_text("not a folder", encoding="utf-8")
    (tmp_path / "Site2" / "IMG_9.jpg").write_text("x", encoding="utf-8")
    store = PathRecordStore([PathRecord(path=""), PathRecord(path="Site2")])
    engine = MutationEngine(store, filesystem, CatalogRecordStore(tmp_path))

    created = engine.create_child("Site2")
    extracted = engine.extract_files("Site2")

    assert created.ok
    assert created.destination == "Site2/New folder_1"
    assert (tmp_path / "Site2" / "New folder_1").is_dir()
    assert extracted.ok
    assert extracted.destination == "Site2/New folder_2"
    assert (tmp_path / "Site2" / "New folder_2" / "IMG_9.jpg").exists()
    assert (tmp_path / "Site2" / "New folder").is_file()
