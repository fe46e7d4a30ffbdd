"""Workspace state management for Deepfield.

This module handles the deepfield/ workspace folder, its persisted
records and the lifecycle of exploration runs.
"""

from deepfield.state.manager import (
    ScaffoldResult,
    WorkspaceManager,
    find_workspace_root,
    get_workspace_manager,
)
from deepfield.state.runs import RunLifecycle, apply_transition, can_transition, refresh_snapshot
from deepfield.state.schemas import (
    FocusArea,
    ProjectConfig,
    ProjectType,
    Repository,
    RunConfig,
    RunStatus,
    StartAnswers,
)
from deepfield.state.store import (
    read_project_config,
    read_record,
    read_run_config,
    update_record,
    write_project_config,
    write_record,
    write_run_config,
)
from deepfield.state.workflow import WorkflowState, detect_workflow_state

__all__ = [
    "ScaffoldResult",
    "WorkspaceManager",
    "find_workspace_root",
    "get_workspace_manager",
    "RunLifecycle",
    "apply_transition",
    "can_transition",
    "refresh_snapshot",
    "FocusArea",
    "ProjectConfig",
    "ProjectType",
    "Repository",
    "RunConfig",
    "RunStatus",
    "StartAnswers",
    "read_project_config",
    "read_record",
    "read_run_config",
    "update_record",
    "write_project_config",
    "write_record",
    "write_run_config",
    "WorkflowState",
    "detect_workflow_state",
]
