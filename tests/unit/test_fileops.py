"""Tests for atomic writes and temp file cleanup."""

import json
from unittest.mock import patch

import pytest

from deepfield.exceptions import FileOperationError, PermissionDeniedError
from deepfield.utils.fileops import (
    atomic_json_write,
    atomic_write,
    cleanup_tmp_files,
    tmp_path_for,
)


class TestAtomicWrite:
    """Test temp file + rename writes."""

    def test_writes_content_and_creates_parents(self, tmp_path):
        """Test that missing parent directories are created."""
        target = tmp_path / "a" / "b" / "file.txt"

        atomic_write(target, "content")

        assert target.read_text() == "content"
        assert not tmp_path_for(target).exists()

    def test_tmp_path_is_sibling(self, tmp_path):
        target = tmp_path / "project.config.json"
        assert tmp_path_for(target) == tmp_path / "project.config.json.tmp"

    def test_interrupted_rename_keeps_previous_file(self, tmp_path):
        """Test that a failed rename leaves the old content and no temp file."""
        target = tmp_path / "state.json"
        target.write_text("old")

        with patch("pathlib.Path.replace", side_effect=OSError("disk full")):
            with pytest.raises(FileOperationError) as exc_info:
                atomic_write(target, "new")

        assert exc_info.value.operation == "write"
        assert target.read_text() == "old"
        assert not tmp_path_for(target).exists()

    def test_interrupted_first_write_leaves_nothing(self, tmp_path):
        """Test that a failed first write leaves the target absent."""
        target = tmp_path / "state.json"

        with patch("pathlib.Path.replace", side_effect=OSError("disk full")):
            with pytest.raises(FileOperationError):
                atomic_write(target, "new")

        assert not target.exists()
        assert list(tmp_path.iterdir()) == []

    def test_permission_error_maps_to_permission_denied(self, tmp_path):
        """Test that PermissionError becomes PermissionDeniedError (exit code 4)."""
        target = tmp_path / "state.json"

        with patch("pathlib.Path.write_text", side_effect=PermissionError("denied")):
            with pytest.raises(PermissionDeniedError) as exc_info:
                atomic_write(target, "new")

        assert exc_info.value.exit_code == 4
        assert exc_info.value.path == target


class TestAtomicJsonWrite:
    def test_pretty_printed(self, tmp_path):
        """Test that JSON is written with a 2-space indent and trailing newline."""
        target = tmp_path / "data.json"

        atomic_json_write(target, {"files": {"a.txt": "1"}})

        text = target.read_text()
        assert text.endswith("}\n")
        assert '  "files": {' in text
        assert json.loads(text) == {"files": {"a.txt": "1"}}


class TestCleanupTmpFiles:
    """Test removal of leftovers from interrupted writes."""

    def test_removes_only_tmp_files(self, tmp_path):
        (tmp_path / "project.config.json.tmp").write_text("partial")
        (tmp_path / "project.config.json").write_text("{}")

        removed = cleanup_tmp_files(tmp_path)

        assert removed == [tmp_path / "project.config.json.tmp"]
        assert (tmp_path / "project.config.json").exists()

    def test_missing_directory(self, tmp_path):
        """Test that a missing directory is not an error."""
        assert cleanup_tmp_files(tmp_path / "missing") == []
