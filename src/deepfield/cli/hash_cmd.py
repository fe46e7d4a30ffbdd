"""Hash command for Deepfield.

Fingerprints every file in a directory and prints the result as JSON.
"""

import json
from pathlib import Path

import typer

from deepfield.cli.utils import get_console
from deepfield.config.settings import get_settings
from deepfield.exceptions import ArgumentError
from deepfield.snapshot import snapshot_with_stats
from deepfield.utils.fileops import atomic_json_write


def hash_dir(
    directory: Path = typer.Argument(..., help="Directory to hash."),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write JSON to this file (atomically) instead of stdout.",
    ),
    batch_size: int | None = typer.Option(
        None,
        "--batch-size",
        "-b",
        help="Files hashed per batch (default from settings, 100).",
    ),
    algorithm: str | None = typer.Option(
        None,
        "--algorithm",
        "-a",
        help="Content digest for non-git directories: sha256 or md5.",
    ),
    no_git: bool = typer.Option(
        False,
        "--no-git",
        help="Always use content digests, even inside a git repository.",
    ),
):
    """Compute content hashes for all files in a directory.

    Git repositories are hashed with git blob ids; other directories with
    content digests, skipping dependency caches, build output and lock files.

    Output format:
        {"files": {"path/to/file": "<hash>", ...},
         "stats": {"total": N, "hashed": N, "ignored": N, "errors": N}}

    Examples:
        deepfield hash ./src
        deepfield hash ./repo --output hashes.json --batch-size 50
    """
    settings = get_settings().hashing
    if batch_size is not None and batch_size < 1:
        raise ArgumentError("Invalid batch size: must be a positive integer")
    if algorithm is not None and algorithm not in ("sha256", "md5"):
        raise ArgumentError(f"Unsupported algorithm '{algorithm}': use sha256 or md5")

    result = snapshot_with_stats(
        directory,
        algorithm=algorithm or settings.algorithm,
        batch_size=batch_size or settings.batch_size,
        max_workers=settings.max_workers,
        use_git=settings.use_git and not no_git,
        extra_ignore=settings.extra_ignore,
    )

    err_console = get_console()
    if not result.files:
        err_console.print("[yellow]Warning:[/yellow] No files found to hash")
    if result.stats.errors:
        err_console.print(f"[yellow]Warning:[/yellow] {result.stats.errors} file(s) could not be read")

    payload = result.to_dict()
    if output is not None:
        atomic_json_write(output, payload)
        err_console.print(
            f"[green]Hashed {result.stats.hashed} files[/green] "
            f"[dim]({result.strategy.value}) -> {output}[/dim]"
        )
    else:
        typer.echo(json.dumps(payload, indent=2))
