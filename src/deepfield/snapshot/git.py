"""Git blob hashing for repositories under version control."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class GitHashingError(Exception):
    """The git tool could not produce blob hashes."""


def is_git_repo(directory: Path) -> bool:
    """Check for git metadata (a .git directory, or a .git file in worktrees)."""
    return (Path(directory) / ".git").exists()


def _run_git(args: list[str], cwd: Path, input_bytes: bytes | None = None) -> bytes:
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            input=input_bytes,
            capture_output=True,
            check=True,
        )
    except FileNotFoundError as e:
        raise GitHashingError("git executable not found") from e
    except subprocess.CalledProcessError as e:
        stderr = e.stderr.decode("utf-8", errors="replace").strip()
        raise GitHashingError(f"git {args[0]} failed: {stderr or e}") from e
    return result.stdout


def list_tracked_files(directory: Path) -> list[str]:
    """List files tracked in the index, as POSIX paths relative to ``directory``.

    Names are decoded with the filesystem encoding, so undecodable bytes
    come back as surrogate escapes, matching what ``os.walk`` yields.
    """
    output = _run_git(["ls-files", "-z"], cwd=directory)
    try:
        return [os.fsdecode(name) for name in output.split(b"\0") if name]
    except UnicodeDecodeError as e:
        raise GitHashingError(f"Undecodable path from git ls-files: {e}") from e


def hash_objects(directory: Path, paths: list[str]) -> list[str]:
    """Compute git blob ids for ``paths`` with a single git invocation.

    Raises:
        GitHashingError: If git fails or returns an unexpected number of ids.
    """
    if not paths:
        return []
    try:
        payload = b"".join(os.fsencode(p) + b"\n" for p in paths)
    except UnicodeEncodeError as e:
        raise GitHashingError(f"Unencodable path for git hash-object: {e}") from e
    output = _run_git(["hash-object", "--stdin-paths"], cwd=directory, input_bytes=payload)
    ids = output.decode("ascii").split()
    if len(ids) != len(paths):
        raise GitHashingError(
            f"git hash-object returned {len(ids)} ids for {len(paths)} paths"
        )
    return ids


def git_blob_hashes(directory: Path, batch_size: int = 100) -> tuple[dict[str, str], int]:
    """Hash every tracked file of a repository.

    Tracked entries that are missing from the work tree (deleted but not
    yet committed) or are not regular files (submodules) are skipped.

    Args:
        directory: Repository root.
        batch_size: Paths sent to one ``git hash-object`` call.

    Returns:
        Tuple of (path -> blob id map, number of tracked entries skipped).

    Raises:
        GitHashingError: If any git invocation fails.
    """
    directory = Path(directory)
    tracked = list_tracked_files(directory)

    hashable: list[str] = []
    skipped = 0
    for rel in tracked:
        # --stdin-paths is newline delimited
        if "\n" in rel or not (directory / rel).is_file():
            skipped += 1
            continue
        hashable.append(rel)

    hashes: dict[str, str] = {}
    for i in range(0, len(hashable), batch_size):
        batch = hashable[i : i + batch_size]
        hashes.update(zip(batch, hash_objects(directory, batch)))

    logger.debug(f"Hashed {len(hashes)} tracked files in {directory} ({skipped} skipped)")
    return hashes, skipped
