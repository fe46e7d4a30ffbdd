"""Workspace manager for Deepfield.

Handles the deepfield/ folder: scaffolding, configuration and runs.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from deepfield.exceptions import (
    DeepfieldError,
    MissingStateError,
    PermissionDeniedError,
    StateError,
)
from deepfield.state.layout import (
    BASELINE_REPOS_DIR,
    BRIEF_FILE,
    DRAFTS_DIR,
    LAYOUT_DIRS,
    OUTPUT_DIR,
    WIP_DIR,
    WORKSPACE_DIR,
    parse_run_number,
    project_config_path,
)
from deepfield.state.runs import RunLifecycle
from deepfield.state.schemas import (
    SCHEMA_VERSION,
    ProjectConfig,
    Repository,
    StartAnswers,
    utc_now,
)
from deepfield.state.store import read_project_config, write_project_config
from deepfield.state.workflow import (
    DEFAULT_BRIEF_MIN_LENGTH,
    WorkflowState,
    detect_workflow_state,
    list_run_dirs,
)
from deepfield.utils.fileops import atomic_write, cleanup_tmp_files

logger = logging.getLogger(__name__)

BRIEF_TEMPLATE = """\
# Project Brief: {{projectName}}

- **Type:** {{projectType}}
- **Created:** {{createdAt}}

## Goal

{{goal}}

## Focus Areas

{{#each focusAreas}}
- {{this}}
{{/each}}

## Context

Describe the system being explored: what it does, who uses it and
which parts matter most.

{{context}}

## Known Pain Points

List what is already known to be confusing, fragile or undocumented.

{{painPoints}}

## Questions to Answer

What should the knowledge base be able to explain once exploration is done?

{{questions}}
"""

_EACH_FOCUS_RE = re.compile(r"\{\{#each focusAreas\}\}.*?\{\{/each\}\}\n?", re.DOTALL)


def render_brief(template: str, config: ProjectConfig) -> str:
    """Replace the brief template placeholders with project values."""
    focus = "".join(f"- {area}\n" for area in config.focus_areas) or "- (none selected)\n"
    text = _EACH_FOCUS_RE.sub(lambda _: focus, template)
    values = {
        "projectName": config.project_name,
        "projectType": config.project_type or "other",
        "goal": config.goal,
        "createdAt": config.created_at.isoformat(),
    }
    for key, value in values.items():
        text = text.replace(f"{{{{{key}}}}}", value)
    return text


@dataclass
class ScaffoldResult:
    """Outcome of scaffolding the workspace layout."""

    created: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    errors: list[tuple[Path, str]] = field(default_factory=list)


class WorkspaceManager:
    """Manages the deepfield/ workspace folder.

    The workspace structure:
        deepfield/
        ├── project.config.json   # Project configuration
        ├── brief.md              # Project brief (filled in by the user)
        ├── source/baseline/repos/  # Source trees under exploration
        ├── wip/run-N/            # One directory per run (run-N.config.json)
        ├── drafts/
        └── output/
    """

    def __init__(self, root: Path, workspace_dir_name: str = WORKSPACE_DIR):
        """Initialize the workspace manager.

        Args:
            root: Directory containing the deepfield/ folder.
            workspace_dir_name: Name of the workspace folder.
        """
        self.root = Path(root).resolve()
        self.workspace_dir = self.root / workspace_dir_name

    @property
    def config_path(self) -> Path:
        """Path to project.config.json."""
        return project_config_path(self.workspace_dir)

    @property
    def brief_path(self) -> Path:
        """Path to brief.md."""
        return self.workspace_dir / BRIEF_FILE

    @property
    def repos_dir(self) -> Path:
        """Path to source/baseline/repos/."""
        return self.workspace_dir / BASELINE_REPOS_DIR

    @property
    def wip_dir(self) -> Path:
        """Path to wip/."""
        return self.workspace_dir / WIP_DIR

    @property
    def drafts_dir(self) -> Path:
        """Path to drafts/."""
        return self.workspace_dir / DRAFTS_DIR

    @property
    def output_dir(self) -> Path:
        """Path to output/."""
        return self.workspace_dir / OUTPUT_DIR

    def exists(self) -> bool:
        """Check if the workspace exists."""
        return self.workspace_dir.is_dir()

    def scaffold(self, force: bool = False) -> ScaffoldResult:
        """Create the directory layout and the brief template.

        Existing directories and files are left alone unless ``force``
        is set, in which case the brief template is rewritten.

        Raises:
            PermissionDeniedError: If the root directory is not writable.
        """
        if self.root.exists() and not os.access(self.root, os.W_OK):
            raise PermissionDeniedError(
                f"No write permission for directory: {self.root}", self.root
            )

        result = ScaffoldResult()
        for rel in ("", *LAYOUT_DIRS):
            path = self.workspace_dir / rel if rel else self.workspace_dir
            if path.is_dir():
                result.skipped.append(path)
                continue
            try:
                path.mkdir(parents=True, exist_ok=True)
                result.created.append(path)
            except OSError as e:
                result.errors.append((path, str(e)))

        if self.brief_path.exists() and not force:
            result.skipped.append(self.brief_path)
        else:
            try:
                atomic_write(self.brief_path, BRIEF_TEMPLATE)
                result.created.append(self.brief_path)
            except DeepfieldError as e:
                result.errors.append((self.brief_path, e.message))

        for directory in (self.workspace_dir, *list_run_dirs(self.workspace_dir)):
            cleanup_tmp_files(directory)
        return result

    def load_config(self) -> ProjectConfig:
        """Load project configuration.

        Raises:
            MissingStateError: If the config file doesn't exist.
        """
        return read_project_config(self.workspace_dir)

    def save_config(self, config: ProjectConfig) -> ProjectConfig:
        """Save project configuration (refreshes ``lastModified``)."""
        return write_project_config(self.workspace_dir, config)

    def discover_repositories(self) -> list[Repository]:
        """Describe each directory under source/baseline/repos/."""
        if not self.repos_dir.is_dir():
            return []
        return [
            Repository(
                name=p.name,
                path=p.relative_to(self.workspace_dir).as_posix(),
                is_git=(p / ".git").exists(),
            )
            for p in sorted(self.repos_dir.iterdir())
            if p.is_dir()
        ]

    def configure(self, answers: StartAnswers, update_brief: bool = True) -> ProjectConfig:
        """Write the project configuration from start answers.

        Reconfiguring keeps the existing ``createdAt``. Project placeholders
        are filled in only while the brief still has ``{{projectName}}``;
        the context sections stay as placeholders for the user.
        """
        now = utc_now()
        created_at = now
        try:
            created_at = self.load_config().created_at
        except MissingStateError:
            pass
        except StateError as e:
            logger.warning(f"Replacing unreadable project configuration: {e.message}")

        config = self.save_config(
            ProjectConfig(
                version=SCHEMA_VERSION,
                project_name=answers.project_name,
                goal=answers.goal,
                project_type=answers.project_type.value,
                focus_areas=[area.value for area in answers.focus_areas],
                repositories=self.discover_repositories(),
                created_at=created_at,
                last_modified=now,
            )
        )

        if update_brief:
            template = BRIEF_TEMPLATE
            if self.brief_path.exists():
                existing = self.brief_path.read_text(encoding="utf-8")
                if "{{projectName}}" not in existing:
                    return config
                template = existing
            atomic_write(self.brief_path, render_brief(template, config))

        return config

    def state(self, min_brief_length: int = DEFAULT_BRIEF_MIN_LENGTH) -> WorkflowState:
        """Derive the current workflow state."""
        return detect_workflow_state(self.workspace_dir, min_brief_length)

    def list_run_numbers(self) -> list[int]:
        """Run numbers of all ``wip/run-N`` directories, ascending."""
        numbers = (parse_run_number(p.name) for p in list_run_dirs(self.workspace_dir))
        return sorted(n for n in numbers if n is not None)

    def latest_run_number(self) -> int | None:
        """Highest existing run number, or None without runs."""
        numbers = self.list_run_numbers()
        return numbers[-1] if numbers else None

    def run(self, run_number: int, **kwargs: Any) -> RunLifecycle:
        """Get the lifecycle for one run (tracking source/baseline/repos/)."""
        kwargs.setdefault("source_dir", self.repos_dir)
        return RunLifecycle(self.workspace_dir, run_number, **kwargs)

    def status_summary(self, min_brief_length: int = DEFAULT_BRIEF_MIN_LENGTH) -> dict[str, Any]:
        """Get a summary of workspace status.

        The configuration is reported as None when it is missing or
        unreadable; the error message is included instead.
        """
        summary: dict[str, Any] = {
            "state": self.state(min_brief_length),
            "root": str(self.root),
            "workspace": str(self.workspace_dir),
            "config": None,
            "config_error": None,
            "runs": self.list_run_numbers(),
        }
        if self.config_path.exists():
            try:
                summary["config"] = self.load_config()
            except DeepfieldError as e:
                summary["config_error"] = e.message
        return summary


def find_workspace_root(
    start_path: Path | None = None,
    workspace_dir_name: str = WORKSPACE_DIR,
) -> Path | None:
    """Find the directory containing deepfield/, searching upward.

    Args:
        start_path: Directory to start searching from. Defaults to cwd.
        workspace_dir_name: Name of the workspace folder.

    Returns:
        Path to the directory containing the workspace, or None if not found.
    """
    current = Path(start_path or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / workspace_dir_name).is_dir():
            return candidate
    return None


def get_workspace_manager(
    path: Path | None = None,
    workspace_dir_name: str = WORKSPACE_DIR,
) -> WorkspaceManager:
    """Get a WorkspaceManager for the given or auto-detected root.

    Falls back to the current directory when no workspace is found, so
    that ``init`` can create one there.
    """
    if path is not None:
        return WorkspaceManager(path, workspace_dir_name)
    root = find_workspace_root(workspace_dir_name=workspace_dir_name) or Path.cwd()
    return WorkspaceManager(root, workspace_dir_name)
