"""Fixed file and directory names inside a Deepfield workspace."""

from pathlib import Path

WORKSPACE_DIR = "deepfield"
PROJECT_CONFIG_FILE = "project.config.json"
BRIEF_FILE = "brief.md"

SOURCE_DIR = "source"
BASELINE_REPOS_DIR = "source/baseline/repos"
WIP_DIR = "wip"
DRAFTS_DIR = "drafts"
OUTPUT_DIR = "output"

LAYOUT_DIRS = (
    SOURCE_DIR,
    "source/baseline",
    BASELINE_REPOS_DIR,
    WIP_DIR,
    DRAFTS_DIR,
    OUTPUT_DIR,
)

RUN_DIR_PREFIX = "run-"


def project_config_path(workspace_dir: Path) -> Path:
    return Path(workspace_dir) / PROJECT_CONFIG_FILE


def run_dir_name(run_number: int) -> str:
    return f"{RUN_DIR_PREFIX}{run_number}"


def run_dir_path(workspace_dir: Path, run_number: int) -> Path:
    return Path(workspace_dir) / WIP_DIR / run_dir_name(run_number)


def run_config_path(workspace_dir: Path, run_number: int) -> Path:
    """Path of wip/run-N/run-N.config.json."""
    return run_dir_path(workspace_dir, run_number) / f"{run_dir_name(run_number)}.config.json"


def parse_run_number(dir_name: str) -> int | None:
    """Run number encoded in a ``run-N`` directory name, or None."""
    if not dir_name.startswith(RUN_DIR_PREFIX):
        return None
    suffix = dir_name[len(RUN_DIR_PREFIX) :]
    return int(suffix) if suffix.isdigit() else None
