"""Run commands for Deepfield.

Start exploration runs and move them through their lifecycle.
"""

from pathlib import Path

import typer
from rich.console import Console

from deepfield.cli.utils import handle_errors, require_workspace, resolve_manager
from deepfield.config.settings import get_settings
from deepfield.state.layout import run_dir_path
from deepfield.state.manager import WorkspaceManager
from deepfield.state.runs import RunLifecycle
from deepfield.state.schemas import RunConfig, RunStatus

console = Console()

app = typer.Typer(
    name="run",
    help="Start exploration runs and advance their status.",
    no_args_is_help=True,
)

DirOption = typer.Option(
    None,
    "--dir",
    "-d",
    help="Directory containing deepfield/ (auto-detected by default).",
)


def _lifecycle(manager: WorkspaceManager, run_number: int) -> RunLifecycle:
    hashing = get_settings().hashing
    return manager.run(
        run_number,
        snapshot_options={
            "algorithm": hashing.algorithm,
            "batch_size": hashing.batch_size,
            "max_workers": hashing.max_workers,
            "use_git": hashing.use_git,
            "extra_ignore": hashing.extra_ignore,
        },
    )


def _print_run(config: RunConfig, changes: list[str] | None = None) -> None:
    console.print(f"[bold]Run {config.run_number}[/bold]: {config.status.value}")
    console.print(f"  Started: {config.started_at.astimezone():%Y-%m-%d %H:%M}")
    if config.completed_at:
        console.print(f"  Finished: {config.completed_at.astimezone():%Y-%m-%d %H:%M}")
    console.print(f"  Source files: {len(config.source_snapshot)}")
    console.print(f"  Changes detected: {'yes' if config.changes_detected else 'no'}")
    console.print(f"  Learnings generated: {'yes' if config.learning_generated else 'no'}")
    if changes:
        console.print(f"  [dim]{len(changes)} file(s) changed since the stored snapshot[/dim]")
        for path in changes[:20]:
            console.print(f"    - {path}")
        if len(changes) > 20:
            console.print(f"    ... and {len(changes) - 20} more")


@app.command("start")
@handle_errors
def start_run(
    run_number: int | None = typer.Argument(
        None,
        help="Run number (defaults to the latest run + 1).",
        min=0,
    ),
    directory: Path | None = DirOption,
):
    """Create a new run in wip/run-N/.

    The run's source snapshot is seeded from the previous run so that the
    next scan reports what changed since then.
    """
    manager = resolve_manager(directory)
    require_workspace(manager)

    if run_number is None:
        latest = manager.latest_run_number()
        run_number = 1 if latest is None else latest + 1

    config = _lifecycle(manager, run_number).start()
    console.print(f"[green]Started run {config.run_number}[/green]")
    console.print(f"  [dim]{run_dir_path(manager.workspace_dir, config.run_number)}[/dim]")


@app.command("advance")
@handle_errors
def advance_run(
    run_number: int = typer.Argument(..., help="Run number.", min=0),
    status: RunStatus = typer.Argument(..., help="Target status."),
    directory: Path | None = DirOption,
):
    """Move a run to a new status.

    Moving to 'scanning' re-hashes source/baseline/repos/ and records
    whether anything changed.

    Example:
        deepfield run advance 1 scanning
    """
    manager = resolve_manager(directory)
    require_workspace(manager)

    lifecycle = _lifecycle(manager, run_number)
    config = lifecycle.advance(status)
    _print_run(config, lifecycle.last_changes)


@app.command("refresh")
@handle_errors
def refresh_run(
    run_number: int = typer.Argument(..., help="Run number.", min=0),
    directory: Path | None = DirOption,
):
    """Re-hash the source tree and update the run's snapshot."""
    manager = resolve_manager(directory)
    require_workspace(manager)

    lifecycle = _lifecycle(manager, run_number)
    config = lifecycle.refresh_snapshot()
    if not lifecycle.last_changes:
        console.print("[dim]No source changes since the stored snapshot[/dim]")
    _print_run(config, lifecycle.last_changes)


@app.command("show")
@handle_errors
def show_run(
    run_number: int = typer.Argument(..., help="Run number.", min=0),
    directory: Path | None = DirOption,
):
    """Show a run's recorded state."""
    manager = resolve_manager(directory)
    require_workspace(manager)
    _print_run(_lifecycle(manager, run_number).load())
