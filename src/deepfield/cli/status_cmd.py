"""Status command for Deepfield.

Shows the current workflow state of a workspace.
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from deepfield.cli.utils import resolve_manager
from deepfield.config.settings import get_settings
from deepfield.exceptions import DeepfieldError
from deepfield.state.manager import WorkspaceManager
from deepfield.state.schemas import ProjectConfig
from deepfield.state.workflow import WorkflowState

console = Console()

STATE_LABELS: dict[WorkflowState, tuple[str, str]] = {
    WorkflowState.EMPTY: ("Not initialized", "dim"),
    WorkflowState.INITIALIZED: ("Initialized (no configuration)", "yellow"),
    WorkflowState.CONFIGURED: ("Configured (brief needs filling)", "blue"),
    WorkflowState.READY: ("Ready for exploration", "green"),
    WorkflowState.IN_PROGRESS: ("Exploration in progress", "cyan"),
    WorkflowState.COMPLETED: ("Completed", "green"),
}

NEXT_STEPS: dict[WorkflowState, str] = {
    WorkflowState.EMPTY: "Run [bold]deepfield init[/bold] to create the directory structure",
    WorkflowState.INITIALIZED: "Run [bold]deepfield start[/bold] to configure your project",
    WorkflowState.CONFIGURED: "Fill out [bold]deepfield/brief.md[/bold] with project context",
    WorkflowState.READY: "Run [bold]deepfield run start[/bold] to begin the first exploration run",
    WorkflowState.IN_PROGRESS: "Exploration is running. Check back later for results.",
    WorkflowState.COMPLETED: "Exploration complete. Check [bold]deepfield/output/[/bold] for results.",
}


def status(
    directory: Path | None = typer.Option(
        None,
        "--dir",
        "-d",
        help="Directory containing deepfield/ (auto-detected by default).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show detailed configuration and run list.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the status as JSON.",
    ),
):
    """Show workspace status.

    Displays:
    - Workflow state (EMPTY, INITIALIZED, CONFIGURED, READY, COMPLETED)
    - Project configuration
    - Exploration runs

    Example:
        deepfield status
        deepfield status -v
    """
    manager = resolve_manager(directory)
    summary = manager.status_summary(get_settings().workflow.brief_min_length)
    state: WorkflowState = summary["state"]
    config: ProjectConfig | None = summary["config"]

    if as_json:
        payload = {
            **summary,
            "state": state.value,
            "config": config.to_dict() if config else None,
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    label, style = STATE_LABELS[state]
    console.print(f"[bold]Current state:[/bold] [{style}]{label}[/{style}]")

    if state is WorkflowState.EMPTY:
        console.print(f"[dim]No workspace found at {manager.workspace_dir}[/dim]")
        console.print(f"\n[bold]Next step:[/bold] {NEXT_STEPS[state]}")
        return

    if summary["config_error"]:
        console.print(f"\n[yellow]Configuration issue:[/yellow] {summary['config_error']}")

    if config is not None:
        _show_config(config, verbose)

    runs: list[int] = summary["runs"]
    if runs:
        console.print("\n[bold]Exploration runs:[/bold]")
        console.print(f"  Total runs: {len(runs)}")
        if verbose:
            _show_runs(manager, runs)

    console.print(f"\n[bold]Next step:[/bold] {NEXT_STEPS[state]}")
    console.print(f"\n[dim]Workspace: {manager.workspace_dir}[/dim]")


def _show_config(config: ProjectConfig, verbose: bool) -> None:
    """Show project configuration."""
    console.print("\n[bold]Project:[/bold]")
    console.print(f"  Name: {config.project_name}")
    console.print(f"  Goal: {config.goal}")
    if config.project_type:
        console.print(f"  Type: {config.project_type}")
    if config.focus_areas:
        console.print(f"  Focus areas: {len(config.focus_areas)}")
    console.print(f"  Last modified: {config.last_modified.astimezone():%Y-%m-%d %H:%M}")

    if verbose:
        console.print(f"  Version: {config.version}")
        console.print(f"  Created: {config.created_at.astimezone():%Y-%m-%d %H:%M}")
        for area in config.focus_areas:
            console.print(f"    - {area}")
        for repo in config.repositories:
            kind = "git" if repo.is_git else "non-git"
            console.print(f"  Repository: {repo.name} ({kind})")


def _show_runs(manager: WorkspaceManager, runs: list[int]) -> None:
    """Show a table of runs with their recorded status."""
    table = Table(title="Runs")
    table.add_column("Run", justify="right")
    table.add_column("Status")
    table.add_column("Started")
    table.add_column("Files", justify="right")
    table.add_column("Changes")

    for number in runs:
        try:
            run = manager.run(number).load()
        except DeepfieldError as e:
            label = getattr(e, "code", "error").lower()
            table.add_row(str(number), f"[red]{label}[/red]", "-", "-", "-")
            continue
        table.add_row(
            str(number),
            run.status.value,
            f"{run.started_at.astimezone():%Y-%m-%d %H:%M}",
            str(len(run.source_snapshot)),
            "yes" if run.changes_detected else "no",
        )

    console.print(table)
