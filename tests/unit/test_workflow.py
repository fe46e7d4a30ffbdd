"""Tests for workflow state detection."""

from unittest.mock import patch

from deepfield.state.schemas import SCHEMA_VERSION, ProjectConfig, utc_now
from deepfield.state.store import write_project_config
from deepfield.state.workflow import (
    WorkflowState,
    brief_is_filled,
    detect_workflow_state,
    list_run_dirs,
)


def _write_config(workspace):
    now = utc_now()
    write_project_config(
        workspace,
        ProjectConfig(
            version=SCHEMA_VERSION,
            project_name="Billing",
            goal="Map the invoicing flow",
            created_at=now,
            last_modified=now,
        ),
    )


class TestDetectWorkflowState:
    """Test state derivation from on-disk artifacts."""

    def test_monotonic_progression(self, tmp_path, filled_brief):
        """Test EMPTY -> INITIALIZED -> CONFIGURED -> READY -> COMPLETED."""
        workspace = tmp_path / "deepfield"
        assert detect_workflow_state(workspace) is WorkflowState.EMPTY

        workspace.mkdir()
        assert detect_workflow_state(workspace) is WorkflowState.INITIALIZED

        _write_config(workspace)
        (workspace / "brief.md").write_text("# Project Brief: {{projectName}}\n")
        assert detect_workflow_state(workspace) is WorkflowState.CONFIGURED

        (workspace / "brief.md").write_text(filled_brief)
        assert detect_workflow_state(workspace) is WorkflowState.READY

        (workspace / "wip" / "run-1").mkdir(parents=True)
        assert detect_workflow_state(workspace) is WorkflowState.COMPLETED

    def test_missing_brief_is_configured(self, tmp_path):
        """Test that a config without any brief counts as configured."""
        workspace = tmp_path / "deepfield"
        workspace.mkdir()
        _write_config(workspace)

        assert detect_workflow_state(workspace) is WorkflowState.CONFIGURED

    def test_undecodable_brief_is_configured(self, tmp_path):
        workspace = tmp_path / "deepfield"
        workspace.mkdir()
        _write_config(workspace)
        (workspace / "brief.md").write_bytes(b"\xff\xfe" * 400)

        assert detect_workflow_state(workspace) is WorkflowState.CONFIGURED

    def test_brief_directory_is_configured(self, tmp_path):
        workspace = tmp_path / "deepfield"
        (workspace / "brief.md").mkdir(parents=True)
        _write_config(workspace)

        assert detect_workflow_state(workspace) is WorkflowState.CONFIGURED

    def test_config_checked_before_runs(self, tmp_path):
        """Test that run directories do not matter without a configuration."""
        workspace = tmp_path / "deepfield"
        (workspace / "wip" / "run-1").mkdir(parents=True)

        assert detect_workflow_state(workspace) is WorkflowState.INITIALIZED

    def test_idempotent(self, tmp_path, filled_brief):
        workspace = tmp_path / "deepfield"
        workspace.mkdir()
        _write_config(workspace)
        (workspace / "brief.md").write_text(filled_brief)
        before = sorted(p.name for p in workspace.iterdir())

        assert detect_workflow_state(workspace) == detect_workflow_state(workspace)
        assert sorted(p.name for p in workspace.iterdir()) == before

    def test_in_progress_never_derived(self, tmp_path, filled_brief):
        workspace = tmp_path / "deepfield"
        workspace.mkdir()
        _write_config(workspace)
        (workspace / "brief.md").write_text(filled_brief)
        (workspace / "wip" / "run-3").mkdir(parents=True)

        assert detect_workflow_state(workspace) is not WorkflowState.IN_PROGRESS


class TestBriefIsFilled:
    def test_short_brief(self, tmp_path):
        brief = tmp_path / "brief.md"
        brief.write_text("Too short")

        assert not brief_is_filled(brief)
        assert brief_is_filled(brief, min_length=5)

    def test_placeholder_marker(self, tmp_path, filled_brief):
        brief = tmp_path / "brief.md"
        brief.write_text(filled_brief + "\n{{goal}}\n")

        assert not brief_is_filled(brief)

    def test_missing(self, tmp_path):
        assert not brief_is_filled(tmp_path / "brief.md")

    def test_unreadable(self, tmp_path, filled_brief):
        brief = tmp_path / "brief.md"
        brief.write_text(filled_brief)

        with patch("pathlib.Path.read_text", side_effect=PermissionError("denied")):
            assert not brief_is_filled(brief)


class TestListRunDirs:
    def test_only_run_directories(self, tmp_path):
        wip = tmp_path / "wip"
        (wip / "run-2").mkdir(parents=True)
        (wip / "run-1").mkdir()
        (wip / "scratch").mkdir()
        (wip / "run-3.txt").write_text("not a directory")

        assert [p.name for p in list_run_dirs(tmp_path)] == ["run-1", "run-2"]
