"""File hashing utilities for Deepfield.

Provides streaming content digests used to fingerprint source trees.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

DEFAULT_ALGORITHM = "sha256"
SUPPORTED_ALGORITHMS = ("sha256", "md5")


def _new_hasher(algorithm: str):
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(
            f"Unsupported hash algorithm '{algorithm}'. "
            f"Choose one of: {', '.join(SUPPORTED_ALGORITHMS)}"
        )
    # Digests are only compared for equality, never used for security
    return hashlib.new(algorithm, usedforsecurity=False)


def file_digest(
    path: Path,
    algorithm: str = DEFAULT_ALGORITHM,
    chunk_size: int = 1024 * 1024,
) -> str:
    """Generate a digest of a file's full content.

    The file is streamed in chunks so large files are never loaded
    into memory at once. Metadata (size, mtime) is not
    mixed in: identical content always yields the identical digest.

    Args:
        path: Path to the file.
        algorithm: "sha256" (default) or "md5".
        chunk_size: Bytes read per iteration (default 1MB).

    Returns:
        Full hex digest string.

    Raises:
        OSError: If the file cannot be opened or read.
    """
    hasher = _new_hasher(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def content_hash(data: bytes, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Generate a digest for arbitrary byte content.

    Args:
        data: Byte content to hash.
        algorithm: "sha256" (default) or "md5".

    Returns:
        Full hex digest string, equal to file_digest() of a file with
        the same bytes.
    """
    hasher = _new_hasher(algorithm)
    hasher.update(data)
    return hasher.hexdigest()


def string_hash(text: str, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Generate a digest for string content (UTF-8 encoded)."""
    return content_hash(text.encode("utf-8"), algorithm)
