"""Shared utilities for CLI commands."""

import functools
import io
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from deepfield.config.settings import get_settings
from deepfield.exceptions import DeepfieldError, MissingStateError
from deepfield.state.manager import WorkspaceManager, get_workspace_manager

# Type variable for decorators
F = TypeVar("F", bound=Callable[..., Any])

# Context storage for flags
_context: dict[str, Any] = {"verbose": False, "quiet": 0}


def set_context(verbose: bool = False, quiet: int = 0) -> None:
    """Set global context values."""
    _context["verbose"] = verbose
    _context["quiet"] = quiet


def get_context_value(key: str, default: Any = None) -> Any:
    """Get a value from the context."""
    return _context.get(key, default)


def get_console() -> Console:
    """Get a Console instance respecting quiet mode.

    Returns a null console when quiet mode is enabled.
    """
    if is_quiet():
        return Console(file=io.StringIO(), stderr=True)
    return Console(stderr=True)


def is_quiet() -> bool:
    """Check if quiet mode is enabled (-q or --silent)."""
    return bool(get_context_value("quiet", 0) >= 1)


def is_silent() -> bool:
    """Check if silent mode is enabled.

    In silent mode, even errors are suppressed (exit code only).
    """
    return bool(get_context_value("quiet", 0) >= 2)


def is_verbose() -> bool:
    """Check if verbose mode is enabled (-v)."""
    return bool(get_context_value("verbose", False))


def configure_logging(verbose: bool = False) -> None:
    """Route library logging to stderr through rich."""
    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    root = logging.getLogger("deepfield")
    root.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


def resolve_manager(directory: Path | None) -> WorkspaceManager:
    """Workspace manager for ``--dir`` or the auto-detected workspace."""
    name = get_settings().workspace_dir_name
    return get_workspace_manager(Path(directory).resolve() if directory else None, name)


def require_workspace(manager: WorkspaceManager) -> None:
    """Raise a missing-state error when the workspace has not been created."""
    if not manager.exists():
        raise MissingStateError(f"No workspace found at {manager.workspace_dir}")


def handle_errors(func: F) -> F:
    """Decorator for consistent CLI error handling.

    Catches common exceptions and displays user-friendly error messages
    instead of raw Python tracebacks. Respects --verbose and --quiet flags.
    Deepfield errors exit with their own code (2 arguments, 3 state,
    4 permissions).
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        err_console = get_console()
        verbose = is_verbose()
        silent = is_silent()

        try:
            return func(*args, **kwargs)
        except DeepfieldError as e:
            if not silent:
                if verbose:
                    err_console.print_exception()
                else:
                    err_console.print(f"[red]Error:[/red] {e.message}")
                    if e.details:
                        err_console.print(f"[dim]{e.details}[/dim]")
                    if e.hint:
                        err_console.print(f"[dim]Hint: {e.hint}[/dim]")
            raise typer.Exit(e.exit_code)
        except PermissionError as e:
            if not silent:
                if verbose:
                    err_console.print_exception()
                else:
                    filename = getattr(e, "filename", None) or str(e)
                    err_console.print(f"[red]Permission denied:[/red] {filename}")
            raise typer.Exit(4)
        except KeyboardInterrupt:
            if not silent:
                err_console.print("\n[yellow]Interrupted[/yellow]")
            raise typer.Exit(130)
        except typer.Exit:
            # Re-raise typer exits (already handled)
            raise
        except typer.BadParameter:
            # Re-raise bad parameter errors
            raise
        except Exception as e:
            if not silent:
                if verbose:
                    err_console.print_exception()
                else:
                    err_console.print(f"[red]Unexpected error:[/red] {type(e).__name__}: {e}")
            raise typer.Exit(1)

    return wrapper  # type: ignore[return-value]
