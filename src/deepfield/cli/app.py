"""Main Typer application for the Deepfield CLI."""

import typer
from rich.console import Console

from deepfield import __version__
from deepfield.cli.utils import configure_logging, handle_errors, set_context

# Default console for output
console = Console(stderr=True)

app = typer.Typer(
    name="deepfield",
    help="""Deepfield: iterative exploration of existing codebases.

    [bold]Workflow Commands:[/bold]
    init        Create the deepfield/ workspace
    start       Configure the project and fill in the brief
    status      Show the workflow state
    run         Start runs and advance their status

    [bold]Utilities:[/bold]
    hash        Fingerprint every file in a directory
    """,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"deepfield version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging and full tracebacks.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress status output; still shows errors.",
    ),
    silent: bool = typer.Option(
        False,
        "--silent",
        help="Completely silent (exit code only).",
    ),
):
    """Deepfield: iterative exploration of existing codebases."""
    ctx.ensure_object(dict)
    quiet_level = 2 if silent else 1 if quiet else 0
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet_level

    # Also set global context for modules that can't access typer context
    set_context(verbose=verbose, quiet=quiet_level)
    configure_logging(verbose)


def _wrap_command(func):
    """Wrap a command function with error handling."""
    return handle_errors(func)


def _setup_commands():
    """Set up all commands after imports are resolved."""
    # Import here to avoid circular imports
    from deepfield.cli import hash_cmd, init_cmd, run_cmd, start_cmd, status_cmd

    app.command("init")(_wrap_command(init_cmd.init))
    app.command("start")(_wrap_command(start_cmd.start))
    app.command("status")(_wrap_command(status_cmd.status))
    app.command("hash")(_wrap_command(hash_cmd.hash_dir))

    # run_cmd wraps its own commands
    app.add_typer(run_cmd.app, name="run")


_setup_commands()


if __name__ == "__main__":
    app()
