"""Tests for the virtual file reader over all storage kinds."""

import zipfile
from unittest.mock import patch

import pytest

from common.errors import InvalidStructure, PackageFileNotFound
from storage.reader import PackageReader
from storage.structure import StorageKind, classify
from mod_fixtures import make_archive_mod, make_directory_mod, make_symlink_mod

FILES = {
    "control.lua": b"require('data')\n",
    "graphics/icons/gear.png": b"\x89PNG",
}


@pytest.fixture(params=["directory", "symlink", "archive", "flat-archive"])
def variant_reader(request, mods_dir, tmp_path):
    """The same package content stored each supported way."""
    if request.param == "directory":
        path = make_directory_mod(mods_dir, "alpha", files=FILES)
    elif request.param == "symlink":
        path = make_symlink_mod(mods_dir, tmp_path / "store", "alpha", files=FILES)
    elif request.param == "archive":
        path = make_archive_mod(mods_dir, "alpha", files=FILES)
    else:
        path = make_archive_mod(mods_dir, "alpha", files=FILES, top_folder=False)
    reader = PackageReader(path, classify(path))
    yield reader
    reader.close()


class TestStorageTransparency:
    """Reads return identical results regardless of the storage kind."""

    def test_read_manifest(self, variant_reader):
        data = variant_reader.read_file("info.json")
        assert b'"alpha"' in data

    def test_read_nested_file(self, variant_reader):
        assert variant_reader.read_file("graphics/icons/gear.png") == b"\x89PNG"

    def test_backslash_separators(self, variant_reader):
        assert variant_reader.read_file("graphics\\icons\\gear.png") == b"\x89PNG"

    def test_missing_file(self, variant_reader):
        with pytest.raises(PackageFileNotFound) as exc:
            variant_reader.read_file("data.lua")
        assert exc.value.relative_name == "data.lua"

    def test_missing_file_is_file_not_found(self, variant_reader):
        with pytest.raises(FileNotFoundError):
            variant_reader.read_file("nope/none.txt")

    def test_parent_escape_rejected(self, variant_reader):
        with pytest.raises(PackageFileNotFound):
            variant_reader.read_file("../mod-list.json")

    def test_list_files(self, variant_reader):
        assert variant_reader.list_files() == ["control.lua", "graphics/icons/gear.png", "info.json"]

    def test_list_files_with_prefix(self, variant_reader):
        assert variant_reader.list_files("graphics") == ["graphics/icons/gear.png"]
        assert variant_reader.list_files("sounds") == []


class TestArchiveReader:
    """Archive specific behaviour."""

    def test_root_manifest_takes_precedence(self, mods_dir):
        path = mods_dir / "mixed.zip"
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("mixed/info.json", b"nested")
            zf.writestr("info.json", b"root")
        reader = PackageReader(str(path), StorageKind.ARCHIVE)
        assert reader.read_file("info.json") == b"root"
        assert reader.list_files() == ["info.json", "mixed/info.json"]

    def test_content_root_is_manifest_folder(self, mods_dir):
        path = mods_dir / "wrapped.zip"
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("__MACOSX/info.txt", b"junk")
            zf.writestr("wrapped_1.0.0/info.json", b"{}")
            zf.writestr("wrapped_1.0.0/data.lua", b"data")
        reader = PackageReader(str(path), StorageKind.ARCHIVE)
        assert reader.list_files() == ["data.lua", "info.json"]
        with pytest.raises(PackageFileNotFound):
            reader.read_file("__MACOSX/info.txt")

    def test_central_directory_parsed_once(self, mods_dir):
        path = make_archive_mod(mods_dir, "alpha", files=FILES)
        reader = PackageReader(path, StorageKind.ARCHIVE)
        original = zipfile.ZipFile._RealGetContents
        with patch.object(zipfile.ZipFile, "_RealGetContents", autospec=True, side_effect=original) as spy:
            reader.read_file("info.json")
            reader.read_file("control.lua")
            reader.list_files()
            with reader:
                reader.read_file("graphics/icons/gear.png")
        assert spy.call_count == 1
        assert reader.is_open
        reader.close()
        assert not reader.is_open

    def test_scope_closes_handle_it_opened(self, mods_dir):
        path = make_archive_mod(mods_dir, "alpha", files=FILES)
        reader = PackageReader(path, StorageKind.ARCHIVE)
        with reader:
            assert reader.is_open
            with reader:
                reader.read_file("control.lua")
            assert reader.is_open
        assert not reader.is_open
        # reads still work after the scope closes, and keep the handle
        assert reader.read_file("control.lua") == FILES["control.lua"]
        assert reader.is_open
        reader.close()

    def test_scope_keeps_handle_opened_earlier(self, mods_dir):
        path = make_archive_mod(mods_dir, "alpha", files=FILES)
        reader = PackageReader(path, StorageKind.ARCHIVE)
        reader.read_file("info.json")
        with reader:
            reader.read_file("control.lua")
        assert reader.is_open
        reader.close()

    def test_close_keeps_index(self, mods_dir):
        path = make_archive_mod(mods_dir, "alpha", files=FILES)
        reader = PackageReader(path, StorageKind.ARCHIVE)
        with reader:
            reader.read_file("info.json")
            reader.close()
            assert not reader.is_open
        assert not reader.is_open
        assert reader._index is not None

    def test_corrupt_archive(self, mods_dir):
        path = mods_dir / "broken.zip"
        path.write_bytes(b"garbage")
        reader = PackageReader(str(path), StorageKind.ARCHIVE)
        with pytest.raises(InvalidStructure):
            reader.read_file("info.json")
