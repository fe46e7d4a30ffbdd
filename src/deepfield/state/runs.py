"""Run lifecycle for Deepfield explorations.

A run moves initialized -> scanning -> analyzing -> learning -> completed.
Any non-terminal run can be paused or failed; a paused run resumes into
one of the working stages. Completed and failed are terminal.

Entering ``scanning`` snapshots the source tree and compares it with the
snapshot stored on the run; any difference sets ``changesDetected`` and
replaces the stored snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from deepfield.exceptions import InvalidTransitionError, RunExistsError, StateError
from deepfield.snapshot import FingerprintMap, diff, snapshot
from deepfield.state.layout import BASELINE_REPOS_DIR, parse_run_number, run_config_path
from deepfield.state.schemas import RunConfig, RunStatus, utc_now
from deepfield.state.store import read_run_config, write_run_config
from deepfield.state.workflow import list_run_dirs

logger = logging.getLogger(__name__)

_WORKING = (RunStatus.SCANNING, RunStatus.ANALYZING, RunStatus.LEARNING)

TRANSITIONS: dict[RunStatus, frozenset[RunStatus]] = {
    RunStatus.INITIALIZED: frozenset({RunStatus.SCANNING, RunStatus.PAUSED, RunStatus.FAILED}),
    RunStatus.SCANNING: frozenset({RunStatus.ANALYZING, RunStatus.PAUSED, RunStatus.FAILED}),
    RunStatus.ANALYZING: frozenset({RunStatus.LEARNING, RunStatus.PAUSED, RunStatus.FAILED}),
    RunStatus.LEARNING: frozenset({RunStatus.COMPLETED, RunStatus.PAUSED, RunStatus.FAILED}),
    RunStatus.PAUSED: frozenset({*_WORKING, RunStatus.FAILED}),
    RunStatus.COMPLETED: frozenset(),
    RunStatus.FAILED: frozenset(),
}

Snapshotter = Callable[..., FingerprintMap]


def can_transition(current: RunStatus, target: RunStatus) -> bool:
    """Check the transition table."""
    return RunStatus(target) in TRANSITIONS[RunStatus(current)]


def new_run(
    run_number: int,
    source_snapshot: FingerprintMap | None = None,
    started_at: datetime | None = None,
) -> RunConfig:
    """Create the initial record for a run (status ``initialized``)."""
    return RunConfig(
        run_number=run_number,
        status=RunStatus.INITIALIZED,
        started_at=started_at or utc_now(),
        source_snapshot=dict(source_snapshot or {}),
    )


def apply_transition(
    config: RunConfig,
    target: RunStatus,
    now: datetime | None = None,
) -> RunConfig:
    """Return a copy of ``config`` moved to ``target``.

    ``completedAt`` is stamped on entering completed or failed; both are
    terminal, so it is never overwritten.

    Raises:
        InvalidTransitionError: If the table does not allow the move.
    """
    target = RunStatus(target)
    if not can_transition(config.status, target):
        raise InvalidTransitionError(config.status.value, target.value)

    update: dict[str, Any] = {"status": target}
    if target.is_terminal:
        update["completed_at"] = now or utc_now()
    return config.model_copy(update=update)


def refresh_snapshot(
    config: RunConfig,
    source_dir: Path,
    snapshotter: Snapshotter = snapshot,
    **snapshot_options: Any,
) -> tuple[RunConfig, list[str]]:
    """Re-fingerprint ``source_dir`` and compare with the run's stored snapshot.

    Returns:
        Tuple of (possibly updated config, changed paths). When nothing
        changed the given config is returned untouched.

    Raises:
        DirectoryNotFoundError: If ``source_dir`` does not exist.
    """
    current = snapshotter(source_dir, **snapshot_options)
    changed = diff(config.source_snapshot, current)
    if not changed:
        return config, changed

    logger.info(f"Run {config.run_number}: {len(changed)} source file(s) changed")
    updated = config.model_copy(
        update={"source_snapshot": dict(current), "changes_detected": True}
    )
    return updated, changed


class RunLifecycle:
    """Drives one run's persisted record through its status transitions.

    Each operation reads the record from disk, computes the new record
    and writes it back atomically; nothing is cached between calls.
    """

    def __init__(
        self,
        workspace_dir: Path,
        run_number: int,
        source_dir: Path | None = None,
        snapshotter: Snapshotter = snapshot,
        snapshot_options: dict[str, Any] | None = None,
    ):
        """Initialize the lifecycle.

        Args:
            workspace_dir: Path to the deepfield/ directory.
            run_number: Caller-assigned run number, unique per workspace.
            source_dir: Tracked source tree. Defaults to source/baseline/repos.
            snapshotter: Function producing a FingerprintMap for a directory.
            snapshot_options: Keyword arguments passed to ``snapshotter``.
        """
        if run_number < 0:
            raise ValueError("run_number must be non-negative")
        self.workspace_dir = Path(workspace_dir)
        self.run_number = run_number
        self.source_dir = Path(source_dir) if source_dir else self.workspace_dir / BASELINE_REPOS_DIR
        self.snapshotter = snapshotter
        self.snapshot_options = dict(snapshot_options or {})
        self.last_changes: list[str] = []

    @property
    def config_path(self) -> Path:
        """Path to run-N.config.json."""
        return run_config_path(self.workspace_dir, self.run_number)

    def exists(self) -> bool:
        """Check if the run has a config file."""
        return self.config_path.exists()

    def load(self) -> RunConfig:
        """Read the run's record."""
        return read_run_config(self.workspace_dir, self.run_number)

    def start(self, seed_from_previous: bool = True) -> RunConfig:
        """Create and persist the run's initial record.

        Args:
            seed_from_previous: Copy the source snapshot of the latest
                earlier run so change detection is relative to it.

        Raises:
            RunExistsError: If this run number is already used.
        """
        if self.exists():
            raise RunExistsError(f"Run {self.run_number} already exists: {self.config_path}")

        seed = self._previous_snapshot() if seed_from_previous else {}
        config = write_run_config(self.workspace_dir, new_run(self.run_number, seed))
        logger.info(f"Started run {self.run_number}")
        return config

    def advance(self, target: RunStatus) -> RunConfig:
        """Move the run to ``target`` and persist it.

        Entering ``scanning`` refreshes the source snapshot in the same
        write.

        Raises:
            InvalidTransitionError: If the move is not allowed.
            DirectoryNotFoundError: If scanning and the source tree is missing.
        """
        target = RunStatus(target)
        config = apply_transition(self.load(), target)
        self.last_changes = []
        if target is RunStatus.SCANNING:
            config, self.last_changes = self._refresh(config)
        config = write_run_config(self.workspace_dir, config)
        logger.info(f"Run {self.run_number} is now {target.value}")
        return config

    def refresh_snapshot(self) -> RunConfig:
        """Re-snapshot the source tree outside of a status change."""
        config, self.last_changes = self._refresh(self.load())
        if self.last_changes:
            config = write_run_config(self.workspace_dir, config)
        return config

    def mark_learning_generated(self) -> RunConfig:
        """Record that learnings were produced by this run."""
        config = self.load().model_copy(update={"learning_generated": True})
        return write_run_config(self.workspace_dir, config)

    def _refresh(self, config: RunConfig) -> tuple[RunConfig, list[str]]:
        return refresh_snapshot(
            config, self.source_dir, self.snapshotter, **self.snapshot_options
        )

    def _previous_snapshot(self) -> FingerprintMap:
        earlier = sorted(
            (
                number
                for number in (parse_run_number(p.name) for p in list_run_dirs(self.workspace_dir))
                if number is not None and number < self.run_number
            ),
            reverse=True,
        )
        for number in earlier:
            try:
                return dict(read_run_config(self.workspace_dir, number).source_snapshot)
            except StateError as e:
                logger.warning(f"Ignoring run {number} when seeding run {self.run_number}: {e}")
        return {}
