"""Utility functions for Deepfield."""

from deepfield.utils.fileops import atomic_json_write, atomic_write, cleanup_tmp_files
from deepfield.utils.hashing import content_hash, file_digest, string_hash

__all__ = [
    "atomic_write",
    "atomic_json_write",
    "cleanup_tmp_files",
    "content_hash",
    "file_digest",
    "string_hash",
]
