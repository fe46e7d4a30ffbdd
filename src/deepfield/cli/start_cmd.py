"""Start command for Deepfield.

Writes the project configuration and fills in the brief template.
"""

import json
import os
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console

from deepfield.cli.utils import require_workspace, resolve_manager
from deepfield.exceptions import ArgumentError
from deepfield.state.schemas import ProjectType, StartAnswers

console = Console()


def _load_answers_json(value: str) -> dict[str, Any]:
    """Parse --answers-json, given either as a file path or inline JSON."""
    text = Path(value).read_text(encoding="utf-8") if os.path.isfile(value) else value
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ArgumentError(
            "--answers-json is neither a JSON file nor valid JSON", details=str(e)
        ) from e
    if not isinstance(data, dict):
        raise ArgumentError("--answers-json must be a JSON object")
    return data


def parse_answers(data: dict[str, Any]) -> StartAnswers:
    """Validate start answers, reporting problems as argument errors."""
    try:
        return StartAnswers.model_validate(data)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ArgumentError("Invalid start answers", details=details) from e


def start(
    answers_json: str | None = typer.Option(
        None,
        "--answers-json",
        help="Answers as a JSON file path or inline JSON (non-interactive).",
    ),
    name: str | None = typer.Option(None, "--name", "-n", help="Project name."),
    goal: str | None = typer.Option(None, "--goal", "-g", help="Exploration goal."),
    project_type: ProjectType = typer.Option(
        ProjectType.OTHER,
        "--type",
        "-t",
        help="Project type.",
    ),
    focus: list[str] = typer.Option(
        [],
        "--focus",
        help="Focus area (repeatable), e.g. --focus architecture --focus apis.",
    ),
    directory: Path | None = typer.Option(
        None,
        "--dir",
        "-d",
        help="Directory containing deepfield/ (auto-detected by default).",
    ),
):
    """Configure the project and fill in the brief.

    Answers come from --answers-json, from options, or are prompted for.
    Re-running keeps the first creation time.

    Examples:
        deepfield start --name "Billing" --goal "Map the invoicing flow"
        deepfield start --answers-json answers.json
    """
    manager = resolve_manager(directory)
    require_workspace(manager)

    if answers_json is not None:
        data = _load_answers_json(answers_json)
    else:
        data = {
            "projectName": name or typer.prompt("Project name"),
            "projectType": project_type.value,
            "goal": goal or typer.prompt("What is the goal of this exploration?"),
            "focusAreas": list(focus),
        }

    answers = parse_answers(data)
    config = manager.configure(answers)

    console.print(f"[green]Configured project '{config.project_name}'[/green]")
    console.print(f"  [dim]Type: {config.project_type}[/dim]")
    console.print(f"  [dim]Focus: {len(config.focus_areas)} area(s)[/dim]")
    console.print(f"  [dim]Repositories: {len(config.repositories)}[/dim]")
    console.print()
    console.print("Next steps:")
    console.print(f"  1. Open [bold]{manager.brief_path}[/bold] and fill in the details")
    console.print("  2. Run [bold]deepfield status[/bold] to check the project is ready")
