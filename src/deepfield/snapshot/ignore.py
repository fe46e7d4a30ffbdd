"""Noise patterns skipped when fingerprinting a source tree."""

from __future__ import annotations

from collections.abc import Iterable

import pathspec

# Gitignore syntax: a trailing slash matches directories at any depth
DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    # Version control
    ".git/",
    # Dependency caches
    "node_modules/",
    "vendor/",
    ".venv/",
    "__pycache__/",
    ".pytest_cache/",
    "*.egg-info/",
    # Build output
    "build/",
    "dist/",
    ".next/",
    "out/",
    "target/",
    # Lock files
    "*.lock",
    "package-lock.json",
    # Environment and OS/editor artifacts
    ".env",
    ".DS_Store",
    "*.swp",
    "*.swo",
    "*~",
)


class IgnoreRules:
    """Compiled ignore patterns matched against POSIX relative paths."""

    def __init__(self, extra_patterns: Iterable[str] | None = None):
        patterns = list(DEFAULT_IGNORE_PATTERNS)
        if extra_patterns:
            patterns.extend(p for p in extra_patterns if p and p.strip())
        self.patterns = patterns
        self._spec = pathspec.GitIgnoreSpec.from_lines(patterns)

    def ignores_dir(self, relative_dir: str) -> bool:
        """Check whether a directory (relative POSIX path) is pruned."""
        return self._spec.match_file(relative_dir.rstrip("/") + "/")

    def ignores_file(self, relative_file: str) -> bool:
        """Check whether a file (relative POSIX path) is skipped."""
        return self._spec.match_file(relative_file)
