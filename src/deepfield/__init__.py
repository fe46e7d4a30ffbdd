"""Deepfield: track an exploration knowledge base across iterative runs.

This module provides the state and change-detection core:
- Content fingerprints of source trees (git blob ids or content digests)
- Validated, atomic persistence of project and run configuration
- Workflow state derived from the workspace layout
- Run lifecycle with source change detection

Example:
    >>> from deepfield import WorkspaceManager, RunStatus
    >>>
    >>> manager = WorkspaceManager(".")
    >>> manager.scaffold()
    >>> run = manager.run(1)
    >>> run.start()
    >>> config = run.advance(RunStatus.SCANNING)
    >>> config.source_snapshot  # fingerprints of source/baseline/repos/
"""

__version__ = "0.1.0"

from deepfield.exceptions import (
    ArgumentError,
    CorruptedStateError,
    DeepfieldError,
    DirectoryNotFoundError,
    FileOperationError,
    InvalidStateError,
    InvalidTransitionError,
    MissingStateError,
    PermissionDeniedError,
    RunExistsError,
    StateError,
    ValidationIssue,
)
from deepfield.snapshot import SnapshotResult, diff, snapshot, snapshot_with_stats
from deepfield.state import (
    ProjectConfig,
    Repository,
    RunConfig,
    RunLifecycle,
    RunStatus,
    WorkflowState,
    WorkspaceManager,
    detect_workflow_state,
    read_project_config,
    read_run_config,
    write_project_config,
    write_run_config,
)

__all__ = [
    "__version__",
    # Exceptions
    "DeepfieldError",
    "ArgumentError",
    "FileOperationError",
    "PermissionDeniedError",
    "DirectoryNotFoundError",
    "StateError",
    "MissingStateError",
    "CorruptedStateError",
    "InvalidStateError",
    "InvalidTransitionError",
    "RunExistsError",
    "ValidationIssue",
    # Hash engine
    "SnapshotResult",
    "snapshot",
    "snapshot_with_stats",
    "diff",
    # State
    "ProjectConfig",
    "Repository",
    "RunConfig",
    "RunStatus",
    "RunLifecycle",
    "WorkflowState",
    "WorkspaceManager",
    "detect_workflow_state",
    "read_project_config",
    "read_run_config",
    "write_project_config",
    "write_run_config",
]
