"""Tests for structural classification of storage entries."""

import os
import zipfile

import pytest

from common.errors import InvalidStructure
from storage.structure import StorageKind, classify
from mod_fixtures import make_archive_mod, make_directory_mod


class TestClassify:
    """Classification rules, first match wins."""

    def test_archive_by_extension(self, mods_dir):
        path = make_archive_mod(mods_dir, "alpha")
        assert classify(path) is StorageKind.ARCHIVE

    def test_archive_extension_is_case_insensitive(self, mods_dir):
        path = make_archive_mod(mods_dir, "alpha", archive_name="ALPHA_1.0.0.ZIP")
        assert classify(path) is StorageKind.ARCHIVE

    def test_archive_wins_even_when_content_is_unreadable(self, mods_dir):
        path = mods_dir / "broken.zip"
        path.write_bytes(b"not a zip")
        assert classify(str(path)) is StorageKind.ARCHIVE

    def test_symlink_before_directory(self, mods_dir, tmp_path):
        target = make_directory_mod(tmp_path / "elsewhere", "beta")
        link = mods_dir / "beta"
        os.symlink(target, link, target_is_directory=True)
        assert classify(str(link)) is StorageKind.SYMLINK

    def test_directory_with_manifest(self, mods_dir):
        path = make_directory_mod(mods_dir, "gamma")
        assert classify(path) is StorageKind.DIRECTORY

    def test_directory_without_manifest_is_invalid(self, mods_dir):
        empty = mods_dir / "empty"
        empty.mkdir()
        with pytest.raises(InvalidStructure) as exc:
            classify(str(empty))
        assert exc.value.entry == str(empty)

    def test_plain_file_is_invalid(self, mods_dir):
        stray = mods_dir / "readme.txt"
        stray.write_text("hello", encoding="utf-8")
        with pytest.raises(InvalidStructure):
            classify(str(stray))


def test_unpacked_kinds():
    assert StorageKind.DIRECTORY.is_unpacked
    assert StorageKind.SYMLINK.is_unpacked
    assert not StorageKind.ARCHIVE.is_unpacked


def test_zip_with_nested_folder_is_still_archive(mods_dir):
    path = mods_dir / "nested.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("deep/inner/info.json", "{}")
    assert classify(str(path)) is StorageKind.ARCHIVE
