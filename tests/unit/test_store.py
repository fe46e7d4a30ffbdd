"""Tests for validated, atomic persistence of workspace records."""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from deepfield.exceptions import (
    CorruptedStateError,
    FileOperationError,
    InvalidStateError,
    MissingStateError,
)
from deepfield.state.layout import run_config_path
from deepfield.state.schemas import SCHEMA_VERSION, ProjectConfig, RunConfig, RunStatus
from deepfield.state.store import (
    read_project_config,
    read_record,
    read_run_config,
    update_record,
    write_project_config,
    write_record,
    write_run_config,
)

CREATED = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


def _project(**overrides) -> ProjectConfig:
    data = {
        "version": SCHEMA_VERSION,
        "project_name": "Billing",
        "goal": "Map the invoicing flow",
        "project_type": "legacy-brownfield",
        "focus_areas": ["architecture"],
        "created_at": CREATED,
        "last_modified": CREATED,
    }
    data.update(overrides)
    return ProjectConfig(**data)


def _run(**overrides) -> RunConfig:
    data = {
        "run_number": 1,
        "status": RunStatus.SCANNING,
        "started_at": CREATED,
        "source_snapshot": {"a.txt": "abc"},
    }
    data.update(overrides)
    return RunConfig(**data)


class TestProjectConfigRoundTrip:
    """Test reading back what was written."""

    def test_round_trip_refreshes_last_modified(self, tmp_path):
        """Test that everything except lastModified survives a round trip."""
        original = _project()

        written = write_project_config(tmp_path, original)
        loaded = read_project_config(tmp_path)

        assert loaded == written
        assert loaded.model_dump(exclude={"last_modified"}) == original.model_dump(
            exclude={"last_modified"}
        )
        assert loaded.last_modified > original.last_modified

    def test_caller_last_modified_is_ignored(self, tmp_path):
        """Test that a stale lastModified in a mapping is overwritten."""
        data = _project().to_dict()
        data["lastModified"] = "1999-01-01T00:00:00Z"

        written = write_project_config(tmp_path, data)

        assert written.last_modified.year > 1999

    def test_camel_case_on_disk(self, tmp_path):
        write_project_config(tmp_path, _project())

        raw = json.loads((tmp_path / "project.config.json").read_text())

        assert raw["projectName"] == "Billing"
        assert raw["focusAreas"] == ["architecture"]
        assert "project_name" not in raw
        assert raw["createdAt"].startswith("2024-01-15T10:30:00")

    def test_pretty_printed(self, tmp_path):
        write_project_config(tmp_path, _project())
        text = (tmp_path / "project.config.json").read_text()
        assert text.startswith('{\n  "version"')

    def test_generic_write_stamps_last_modified(self, tmp_path):
        path = tmp_path / "project.config.json"

        written = write_record(path, _project(), ProjectConfig)

        assert written.last_modified > CREATED
        assert read_record(path, ProjectConfig).last_modified == written.last_modified

    def test_update_record_stamps_last_modified(self, tmp_path):
        """Test that a merged update also refreshes lastModified."""
        path = tmp_path / "project.config.json"
        path.write_text(json.dumps(_project().to_dict()))

        updated = update_record(path, {"goal": "Find the tax rules"}, ProjectConfig)

        assert updated.goal == "Find the tax rules"
        assert updated.created_at == CREATED
        assert read_record(path, ProjectConfig).last_modified > CREATED


class TestReadErrors:
    """Test that read failures are distinguished."""

    def test_missing(self, tmp_path):
        with pytest.raises(MissingStateError) as exc_info:
            read_project_config(tmp_path)
        assert exc_info.value.code == "MISSING"
        assert exc_info.value.exit_code == 3

    def test_corrupted(self, tmp_path):
        (tmp_path / "project.config.json").write_text("{not json")

        with pytest.raises(CorruptedStateError) as exc_info:
            read_project_config(tmp_path)
        assert exc_info.value.code == "CORRUPTED"

    def test_not_utf8_is_corrupted(self, tmp_path):
        (tmp_path / "project.config.json").write_bytes(b"\xff\xfe\x00")

        with pytest.raises(CorruptedStateError):
            read_project_config(tmp_path)

    def test_missing_required_field(self, tmp_path):
        """Test that a parseable record without a required field is invalid."""
        data = _project().to_dict()
        del data["goal"]
        (tmp_path / "project.config.json").write_text(json.dumps(data))

        with pytest.raises(InvalidStateError) as exc_info:
            read_project_config(tmp_path)

        assert exc_info.value.code == "INVALID"
        assert [issue.location for issue in exc_info.value.issues] == ["goal"]

    def test_enum_out_of_range(self, tmp_path):
        data = _run().to_dict()
        data["status"] = "sleeping"
        path = run_config_path(tmp_path, 1)
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps(data))

        with pytest.raises(InvalidStateError) as exc_info:
            read_run_config(tmp_path, 1)
        assert exc_info.value.issues[0].location == "status"

    def test_wrong_type(self, tmp_path):
        data = _run().to_dict()
        data["changesDetected"] = "yes"
        path = tmp_path / "run.json"
        path.write_text(json.dumps(data))

        with pytest.raises(InvalidStateError):
            read_record(path, RunConfig)


class TestWriteValidation:
    """Test that invalid records never reach disk."""

    def test_invalid_write_does_no_io(self, tmp_path):
        """Test that validation failure raises before any file is touched."""
        target = tmp_path / "run.json"
        bad = _run().to_dict()
        bad["runNumber"] = -1

        with patch("deepfield.state.store.atomic_json_write") as mock_write:
            with pytest.raises(InvalidStateError):
                write_record(target, bad, RunConfig)

        mock_write.assert_not_called()
        assert list(tmp_path.iterdir()) == []

    def test_blank_project_name_rejected(self, tmp_path):
        data = _project().to_dict()
        data["projectName"] = "   "

        with pytest.raises(InvalidStateError):
            write_project_config(tmp_path, data)
        assert not (tmp_path / "project.config.json").exists()

    def test_created_after_modified_rejected(self):
        with pytest.raises(ValueError):
            _project(last_modified=CREATED - timedelta(days=1))

    def test_naive_timestamp_rejected(self, tmp_path):
        data = _run().to_dict()
        data["startedAt"] = "2024-01-15T10:30:00"

        with pytest.raises(InvalidStateError):
            write_record(tmp_path / "run.json", data, RunConfig)

    def test_failed_write_keeps_previous_record(self, tmp_path):
        """Test that an interrupted write leaves the prior record readable."""
        write_run_config(tmp_path, _run())

        with patch("pathlib.Path.replace", side_effect=OSError("disk full")):
            with pytest.raises(FileOperationError):
                write_run_config(tmp_path, _run(source_snapshot={"b.txt": "def"}))

        assert read_run_config(tmp_path, 1).source_snapshot == {"a.txt": "abc"}


class TestRunConfig:
    """Test run records."""

    def test_round_trip(self, tmp_path):
        written = write_run_config(tmp_path, _run())

        assert run_config_path(tmp_path, 1).name == "run-1.config.json"
        assert read_run_config(tmp_path, 1) == written

    def test_completed_at_only_when_terminal(self):
        with pytest.raises(ValueError):
            _run(status=RunStatus.ANALYZING, completed_at=CREATED)

        done = _run(status=RunStatus.COMPLETED, completed_at=CREATED + timedelta(hours=1))
        assert done.completed_at > done.started_at

    def test_completed_before_started_rejected(self):
        with pytest.raises(ValueError):
            _run(status=RunStatus.FAILED, completed_at=CREATED - timedelta(seconds=1))

    def test_update_record_merges(self, tmp_path):
        """Test that updates are merged into the stored record."""
        write_run_config(tmp_path, _run())
        path = run_config_path(tmp_path, 1)

        updated = update_record(path, {"learningGenerated": True}, RunConfig)

        assert updated.learning_generated is True
        assert updated.source_snapshot == {"a.txt": "abc"}
        assert read_run_config(tmp_path, 1).learning_generated is True

    def test_update_missing_record(self, tmp_path):
        with pytest.raises(MissingStateError):
            update_record(tmp_path / "run.json", {"learningGenerated": True}, RunConfig)
