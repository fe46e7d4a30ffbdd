"""Atomic file writes for workspace state."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from deepfield.exceptions import FileOperationError, PermissionDeniedError

logger = logging.getLogger(__name__)

TMP_SUFFIX = ".tmp"


def tmp_path_for(path: Path) -> Path:
    """Sibling temporary path used while writing ``path``."""
    return path.with_name(path.name + TMP_SUFFIX)


def atomic_write(path: Path, content: str) -> None:
    """Write text atomically using temp file + rename.

    The rename is the only point at which the target changes, so a
    reader sees either the previous file or the complete new one.

    Args:
        path: Target file path. Parent directories are created.
        content: Text to write (UTF-8).

    Raises:
        PermissionDeniedError: If the directory or file is not writable.
        FileOperationError: For any other filesystem failure.
    """
    path = Path(path)
    tmp_path = tmp_path_for(path)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(content, encoding="utf-8")
        tmp_path.replace(path)  # Atomic on POSIX systems
    except OSError as e:
        _remove_quietly(tmp_path)
        if isinstance(e, PermissionError):
            raise PermissionDeniedError(
                f"Permission denied writing {path}", path, details=str(e)
            ) from e
        raise FileOperationError(
            f"Failed to write file {path}", operation="write", details=str(e)
        ) from e


def atomic_json_write(path: Path, data: dict[str, Any]) -> None:
    """Write JSON data atomically, pretty-printed with 2-space indent."""
    atomic_write(path, json.dumps(data, indent=2) + "\n")


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.debug(f"Could not remove temp file {path}: {e}")


def cleanup_tmp_files(directory: Path) -> list[Path]:
    """Remove leftover ``*.tmp`` files from interrupted writes.

    Errors are logged and ignored.

    Args:
        directory: Directory to clean (not recursive).

    Returns:
        Paths that were removed.
    """
    directory = Path(directory)
    removed: list[Path] = []
    if not directory.is_dir():
        return removed

    try:
        candidates = [p for p in directory.iterdir() if p.name.endswith(TMP_SUFFIX)]
    except OSError as e:
        logger.debug(f"Could not list {directory}: {e}")
        return removed

    for tmp_file in candidates:
        try:
            tmp_file.unlink()
            removed.append(tmp_file)
        except OSError as e:
            logger.debug(f"Could not remove {tmp_file}: {e}")

    if removed:
        logger.info(f"Removed {len(removed)} stale temp file(s) from {directory}")
    return removed
