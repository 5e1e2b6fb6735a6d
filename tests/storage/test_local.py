"""Tests for LocalDriver.

These tests run against a temp directory so no external dependencies needed.
"""

import os

import pytest

from storage import LocalDriver, StorageError, FOLDER_MIME_TYPE, open_folder, parse_storage_uri
from workflows import list_all_files


@pytest.fixture
def populated_dir(temp_dir):
    """Create a temp directory with some test files and folders."""
    with open(os.path.join(temp_dir, "notes.txt"), "w") as f:
        f.write("content1")
    with open(os.path.join(temp_dir, "Business_Plan.pdf"), "w") as f:
        f.write("pdf content")

    subdir = os.path.join(temp_dir, "subdir")
    os.makedirs(subdir)
    with open(os.path.join(subdir, "nested.txt"), "w") as f:
        f.write("nested content")

    return temp_dir


class TestLocalDriverBasics:
    """Basic functionality tests."""

    def test_display_name(self, temp_dir):
        driver = LocalDriver(temp_dir)
        assert temp_dir in driver.display_name
        assert "local" in driver.display_name

    def test_nonexistent_root_raises(self):
        with pytest.raises(StorageError):
            LocalDriver("/nonexistent/path/12345")

    def test_root_folder_id_is_empty(self, temp_dir):
        assert LocalDriver(temp_dir).root_folder_id == ""

    def test_get_item_root(self, populated_dir):
        item = LocalDriver(populated_dir).get_item("")
        assert item.is_folder
        assert item.name == os.path.basename(populated_dir)

    def test_get_item_missing_raises(self, populated_dir):
        with pytest.raises(StorageError):
            LocalDriver(populated_dir).get_item("missing.txt")

    def test_path_escape_rejected(self, populated_dir):
        with pytest.raises(StorageError):
            LocalDriver(populated_dir).download_bytes("../outside.txt")


class TestListChildren:
    """Tests for list_children()."""

    def test_empty(self, temp_dir):
        assert LocalDriver(temp_dir).list_children("") == ([], None)

    def test_folders_first_then_names(self, populated_dir):
        items, token = LocalDriver(populated_dir).list_children("")
        assert [i.name for i in items] == ["subdir", "Business_Plan.pdf", "notes.txt"]
        assert token is None
        assert items[0].mime_type == FOLDER_MIME_TYPE
        assert items[1].mime_type == "application/pdf"
        assert items[2].mime_type == "text/plain"

    def test_paths_use_base_path(self, populated_dir):
        items, _ = LocalDriver(populated_dir).list_children("subdir", base_path="subdir")
        assert items[0].id == "subdir/nested.txt"
        assert items[0].path == "subdir/nested.txt"

    def test_pagination(self, populated_dir):
        driver = LocalDriver(populated_dir)
        first, token = driver.list_children("", page_size=2)
        assert len(first) == 2
        assert token == "2"
        second, token = driver.list_children("", page_token=token, page_size=2)
        assert [i.name for i in second] == ["notes.txt"]
        assert token is None

    def test_name_filter_is_case_insensitive(self, populated_dir):
        items, _ = LocalDriver(populated_dir).list_children("", name_contains="PLAN")
        assert [i.name for i in items] == ["Business_Plan.pdf"]

    def test_mime_type_filter(self, populated_dir):
        items, _ = LocalDriver(populated_dir).list_children("", mime_type=FOLDER_MIME_TYPE)
        assert [i.name for i in items] == ["subdir"]

    def test_listing_a_file_raises(self, populated_dir):
        with pytest.raises(StorageError):
            LocalDriver(populated_dir).list_children("notes.txt")

    def test_subdirectory_named_root(self, temp_dir):
        os.makedirs(os.path.join(temp_dir, "root"))
        with open(os.path.join(temp_dir, "top.txt"), "w") as f:
            f.write("top")
        with open(os.path.join(temp_dir, "root", "inner.txt"), "w") as f:
            f.write("inner")

        driver = LocalDriver(temp_dir)
        items, _ = driver.list_children("root", base_path="root")
        assert [i.id for i in items] == ["root/inner.txt"]

        files = list_all_files(driver, driver.root_folder_id)
        assert sorted(f.path for f in files) == ["root/inner.txt", "top.txt"]


class TestContent:
    """Tests for download_bytes() and export_text()."""

    def test_download_bytes(self, populated_dir):
        assert LocalDriver(populated_dir).download_bytes("subdir/nested.txt") == b"nested content"

    def test_download_missing_raises(self, populated_dir):
        with pytest.raises(StorageError):
            LocalDriver(populated_dir).download_bytes("nonexistent.txt")

    def test_export_not_supported(self, populated_dir):
        with pytest.raises(StorageError):
            LocalDriver(populated_dir).export_text("notes.txt", "text/plain")


class TestStorageUri:
    """Tests for parse_storage_uri() and open_folder()."""

    def test_parse(self):
        assert parse_storage_uri("gdrive:abc123") == ("gdrive", "abc123")
        assert parse_storage_uri("local:/tmp/x") == ("local", "/tmp/x")

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            parse_storage_uri("dropbox:/x")

    def test_open_local_folder(self, populated_dir):
        driver, folder_id = open_folder(f"local:{populated_dir}")
        assert isinstance(driver, LocalDriver)
        assert folder_id == ""
