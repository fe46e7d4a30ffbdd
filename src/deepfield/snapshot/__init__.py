"""Content fingerprinting of source trees.

Example:
    >>> from deepfield.snapshot import snapshot, diff
    >>> before = snapshot("deepfield/source/baseline/repos")
    >>> # ... edit files ...
    >>> diff(before, snapshot("deepfield/source/baseline/repos"))
    ['app/models.py']
"""

from deepfield.snapshot.engine import (
    FingerprintMap,
    HashStats,
    HashStrategy,
    SnapshotResult,
    collect_files,
    diff,
    hash_files,
    select_strategy,
    snapshot,
    snapshot_with_stats,
)
from deepfield.snapshot.ignore import DEFAULT_IGNORE_PATTERNS, IgnoreRules

__all__ = [
    "FingerprintMap",
    "HashStats",
    "HashStrategy",
    "SnapshotResult",
    "collect_files",
    "diff",
    "hash_files",
    "select_strategy",
    "snapshot",
    "snapshot_with_stats",
    "DEFAULT_IGNORE_PATTERNS",
    "IgnoreRules",
]
