"""Workflow state of a Deepfield workspace.

The state is never stored; it is derived from which artifacts exist on
disk each time it is asked for.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from deepfield.state.layout import BRIEF_FILE, PROJECT_CONFIG_FILE, RUN_DIR_PREFIX, WIP_DIR

logger = logging.getLogger(__name__)

DEFAULT_BRIEF_MIN_LENGTH = 500
PLACEHOLDER_MARKER = "{{"


class WorkflowState(str, Enum):
    """Coarse lifecycle stage of a workspace."""

    EMPTY = "EMPTY"  # No workspace directory
    INITIALIZED = "INITIALIZED"  # Workspace exists but no config
    CONFIGURED = "CONFIGURED"  # Config exists, brief not filled in
    READY = "READY"  # Brief filled in, no runs yet
    IN_PROGRESS = "IN_PROGRESS"  # Reserved; not derived from disk
    COMPLETED = "COMPLETED"  # At least one run exists


def brief_is_filled(brief_path: Path, min_length: int = DEFAULT_BRIEF_MIN_LENGTH) -> bool:
    """Check whether the brief exists and no longer looks like the template.

    A brief that cannot be read as UTF-8 text counts as not filled in.
    """
    try:
        content = Path(brief_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Brief not readable at {brief_path}: {e}")
        return False
    return PLACEHOLDER_MARKER not in content and len(content) >= min_length


def list_run_dirs(workspace_dir: Path) -> list[Path]:
    """Run directories (``wip/run-*``), sorted by name."""
    wip_dir = Path(workspace_dir) / WIP_DIR
    if not wip_dir.is_dir():
        return []
    return sorted(
        p for p in wip_dir.iterdir() if p.is_dir() and p.name.startswith(RUN_DIR_PREFIX)
    )


def detect_workflow_state(
    workspace_dir: Path,
    min_brief_length: int = DEFAULT_BRIEF_MIN_LENGTH,
) -> WorkflowState:
    """Derive the workflow state from the workspace layout.

    First match wins: EMPTY, INITIALIZED, CONFIGURED, COMPLETED, READY.
    Reads only; calling it twice on unchanged disk gives the same answer.

    Args:
        workspace_dir: Path to the deepfield/ directory.
        min_brief_length: Briefs shorter than this count as not filled in.
    """
    workspace_dir = Path(workspace_dir)

    if not workspace_dir.is_dir():
        return WorkflowState.EMPTY

    if not (workspace_dir / PROJECT_CONFIG_FILE).exists():
        return WorkflowState.INITIALIZED

    if not brief_is_filled(workspace_dir / BRIEF_FILE, min_brief_length):
        return WorkflowState.CONFIGURED

    if list_run_dirs(workspace_dir):
        return WorkflowState.COMPLETED

    return WorkflowState.READY
