"""Init command for Deepfield.

Creates the deepfield/ workspace with the required structure.
"""

from pathlib import Path

import typer
from rich.console import Console

from deepfield.cli.utils import resolve_manager

console = Console()


def init(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite the brief template if it already exists.",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip the confirmation when the workspace already exists.",
    ),
    directory: Path = typer.Argument(
        Path("."),
        help="Directory to initialize (defaults to current directory).",
    ),
):
    """Initialize the deepfield/ directory structure.

    Creates:
    - source/baseline/repos/ (source trees to explore)
    - wip/ (one run-N directory per run)
    - drafts/ and output/
    - brief.md (template to fill in)

    Example:
        deepfield init
        deepfield init --force --yes
    """
    manager = resolve_manager(directory)

    if manager.exists():
        console.print(f"[yellow]Workspace already exists at {manager.workspace_dir}[/yellow]")
        if not yes and not typer.confirm(
            "Continue? (existing files will be preserved)", default=False
        ):
            console.print("[dim]Operation cancelled[/dim]")
            raise typer.Exit(0)

    result = manager.scaffold(force=force)

    for path in result.created:
        console.print(f"  [green]created[/green] {path.relative_to(manager.root)}")
    for path in result.skipped:
        console.print(f"  [dim]exists[/dim]  {path.relative_to(manager.root)}")
    for path, error in result.errors:
        console.print(f"  [red]failed[/red]  {path.relative_to(manager.root)}: {error}")

    if result.errors:
        raise typer.Exit(1)

    console.print()
    console.print(f"[green]Workspace ready at {manager.workspace_dir}[/green]")
    console.print("Next steps:")
    console.print("  1. Put source trees under [bold]deepfield/source/baseline/repos/[/bold]")
    console.print("  2. Run [bold]deepfield start[/bold] to configure the project")
    console.print("  3. Fill in [bold]deepfield/brief.md[/bold]")
