"""Source tree fingerprinting and change detection.

A snapshot maps every file under a directory (relative POSIX path) to a
content hash. Repositories under git are hashed with git blob ids; any
other directory is walked and digested file by file.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from deepfield.exceptions import DirectoryNotFoundError
from deepfield.snapshot.git import GitHashingError, git_blob_hashes, is_git_repo
from deepfield.snapshot.ignore import IgnoreRules
from deepfield.utils.hashing import DEFAULT_ALGORITHM, file_digest

logger = logging.getLogger(__name__)

FingerprintMap = dict[str, str]

DEFAULT_BATCH_SIZE = 100
DEFAULT_MAX_WORKERS = 4


class HashStrategy(str, Enum):
    """How fingerprints were computed."""

    GIT = "git"
    CONTENT = "content"


@dataclass
class HashStats:
    """Counters for one snapshot call."""

    total: int = 0
    hashed: int = 0
    ignored: int = 0
    errors: int = 0

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "hashed": self.hashed,
            "ignored": self.ignored,
            "errors": self.errors,
        }


@dataclass
class SnapshotResult:
    """Fingerprints of a directory plus how they were obtained."""

    files: FingerprintMap = field(default_factory=dict)
    stats: HashStats = field(default_factory=HashStats)
    strategy: HashStrategy = HashStrategy.CONTENT

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "files": dict(sorted(self.files.items())),
            "stats": self.stats.to_dict(),
        }


def select_strategy(directory: Path, use_git: bool = True) -> HashStrategy:
    """Pick the hashing strategy for a directory, once per snapshot."""
    if use_git and is_git_repo(directory):
        return HashStrategy.GIT
    return HashStrategy.CONTENT


def collect_files(
    directory: Path,
    ignore: IgnoreRules | None = None,
    stats: HashStats | None = None,
) -> list[str]:
    """Walk ``directory`` and return files as POSIX paths relative to it.

    Ignored directories are pruned before descending. A directory that
    cannot be listed because of a permission error is skipped; any other
    listing error propagates.

    Args:
        directory: Base directory; every returned path is relative to it.
        ignore: Ignore rules. Defaults to the built-in noise patterns.
        stats: Optional counters updated with ignored entries and errors.

    Returns:
        Sorted list of relative file paths.
    """
    base = Path(directory)
    ignore = ignore or IgnoreRules()
    stats = stats if stats is not None else HashStats()
    files: list[str] = []

    def on_error(error: OSError) -> None:
        if isinstance(error, PermissionError):
            logger.warning(f"Skipping unreadable directory: {error.filename}")
            stats.errors += 1
            return
        raise error

    for root, dirs, filenames in os.walk(base, onerror=on_error):
        rel_root = Path(root).relative_to(base)

        kept_dirs = []
        for d in sorted(dirs):
            if ignore.ignores_dir((rel_root / d).as_posix()):
                stats.ignored += 1
            else:
                kept_dirs.append(d)
        dirs[:] = kept_dirs

        for name in filenames:
            rel = (rel_root / name).as_posix()
            if ignore.ignores_file(rel):
                stats.ignored += 1
                continue
            files.append(rel)

    files.sort()
    return files


def _digest_or_none(path: Path, algorithm: str) -> str | None:
    try:
        return file_digest(path, algorithm)
    except OSError as e:
        logger.debug(f"Failed to hash {path}: {e}")
        return None


def hash_files(
    directory: Path,
    files: list[str],
    algorithm: str = DEFAULT_ALGORITHM,
    batch_size: int = DEFAULT_BATCH_SIZE,
    max_workers: int = DEFAULT_MAX_WORKERS,
    stats: HashStats | None = None,
) -> FingerprintMap:
    """Digest ``files`` (relative to ``directory``) in bounded batches.

    Each batch is hashed over a thread pool. Unreadable files are counted
    as errors and left out of the result. Neither batch size nor worker
    count affects the returned map.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be a positive integer")
    base = Path(directory)
    stats = stats if stats is not None else HashStats()
    hashes: FingerprintMap = {}

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        for i in range(0, len(files), batch_size):
            batch = files[i : i + batch_size]
            digests = executor.map(lambda rel: _digest_or_none(base / rel, algorithm), batch)
            for rel, digest in zip(batch, digests):
                if digest is None:
                    stats.errors += 1
                else:
                    hashes[rel] = digest
                    stats.hashed += 1

    return hashes


def _content_snapshot(
    directory: Path,
    algorithm: str,
    batch_size: int,
    max_workers: int,
    ignore: IgnoreRules,
) -> SnapshotResult:
    stats = HashStats()
    files = collect_files(directory, ignore=ignore, stats=stats)
    stats.total = len(files)
    hashes = hash_files(
        directory,
        files,
        algorithm=algorithm,
        batch_size=batch_size,
        max_workers=max_workers,
        stats=stats,
    )
    return SnapshotResult(files=hashes, stats=stats, strategy=HashStrategy.CONTENT)


def snapshot_with_stats(
    directory: Path,
    algorithm: str = DEFAULT_ALGORITHM,
    batch_size: int = DEFAULT_BATCH_SIZE,
    max_workers: int = DEFAULT_MAX_WORKERS,
    use_git: bool = True,
    extra_ignore: list[str] | None = None,
) -> SnapshotResult:
    """Fingerprint every file under ``directory``.

    Args:
        directory: Directory to hash.
        algorithm: Content digest for the generic strategy ("sha256" or "md5").
        batch_size: Files hashed per batch.
        max_workers: Threads used within a batch.
        use_git: Allow the git blob strategy when ``directory`` is a repository.
        extra_ignore: Additional gitignore-style patterns for the generic walk.

    Returns:
        SnapshotResult with the fingerprint map, counters and strategy used.

    Raises:
        DirectoryNotFoundError: If ``directory`` does not exist.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise DirectoryNotFoundError(f"Directory not found: {directory}", directory)

    strategy = select_strategy(directory, use_git=use_git)
    if strategy is HashStrategy.GIT:
        try:
            hashes, skipped = git_blob_hashes(directory, batch_size=batch_size)
        except GitHashingError as e:
            logger.warning(f"Git hashing failed for {directory}, using content digests: {e}")
        else:
            stats = HashStats(
                total=len(hashes) + skipped,
                hashed=len(hashes),
                ignored=skipped,
            )
            return SnapshotResult(files=hashes, stats=stats, strategy=HashStrategy.GIT)

    return _content_snapshot(
        directory,
        algorithm=algorithm,
        batch_size=batch_size,
        max_workers=max_workers,
        ignore=IgnoreRules(extra_ignore),
    )


def snapshot(directory: Path, **kwargs: Any) -> FingerprintMap:
    """Fingerprint every file under ``directory``.

    Accepts the same keyword arguments as snapshot_with_stats().

    Raises:
        DirectoryNotFoundError: If ``directory`` does not exist.
    """
    return snapshot_with_stats(directory, **kwargs).files


def diff(old: FingerprintMap, new: FingerprintMap) -> list[str]:
    """Paths added, modified or deleted between two snapshots.

    Returns:
        Sorted list of changed paths; empty when the maps are equal.
    """
    changed = {path for path, digest in new.items() if old.get(path) != digest}
    changed.update(path for path in old if path not in new)
    return sorted(changed)
