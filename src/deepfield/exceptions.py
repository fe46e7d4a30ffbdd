"""Custom exceptions for Deepfield."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class DeepfieldError(Exception):
    """Base exception for all Deepfield errors."""

    exit_code: int = 1
    default_hint: str | None = None

    def __init__(
        self,
        message: str,
        details: str | None = None,
        hint: str | None = None,
    ):
        self.message = message
        self.details = details
        self.hint = hint or self.default_hint
        super().__init__(message)


class ArgumentError(DeepfieldError):
    """Invalid command arguments."""

    exit_code = 2
    default_hint = 'Check "deepfield --help" for correct usage'


class FileOperationError(DeepfieldError):
    """A filesystem operation failed for a reason other than permissions."""

    def __init__(self, message: str, operation: str, **kwargs):
        self.operation = operation
        super().__init__(message, **kwargs)


class PermissionDeniedError(DeepfieldError):
    """Cannot read or write the target path."""

    exit_code = 4
    default_hint = "Check the directory permissions or run as a user that owns the workspace"

    def __init__(self, message: str, path: Path | str, **kwargs):
        self.path = Path(path)
        super().__init__(message, **kwargs)


class DirectoryNotFoundError(DeepfieldError):
    """Hashing target does not exist."""

    default_hint = "Check the path of the source tree"

    def __init__(self, message: str, path: Path | str, **kwargs):
        self.path = Path(path)
        super().__init__(message, **kwargs)


# State errors (exit code 3)
class StateError(DeepfieldError):
    """Problem with a persisted state file."""

    exit_code = 3
    code: str = "INVALID"


class MissingStateError(StateError):
    """Expected state file is absent."""

    code = "MISSING"
    default_hint = 'Run "deepfield init" first to create the directory structure'


class CorruptedStateError(StateError):
    """State file content cannot be parsed."""

    code = "CORRUPTED"
    default_hint = "Check the file for syntax errors or restore from backup"


@dataclass(frozen=True)
class ValidationIssue:
    """A single schema violation."""

    location: str
    message: str

    def __str__(self) -> str:
        return f"{self.location}: {self.message}" if self.location else self.message


class InvalidStateError(StateError):
    """State parses but violates the schema."""

    code = "INVALID"
    default_hint = "Verify the configuration matches the expected schema"

    def __init__(
        self,
        message: str,
        issues: list[ValidationIssue] | None = None,
        **kwargs,
    ):
        self.issues = list(issues or [])
        if self.issues and "details" not in kwargs:
            kwargs["details"] = "; ".join(str(issue) for issue in self.issues)
        super().__init__(message, **kwargs)


class InvalidTransitionError(StateError):
    """Run status change not permitted by the transition table."""

    code = "TRANSITION"

    def __init__(self, current: str, target: str, **kwargs):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move run from '{current}' to '{target}'", **kwargs)


class RunExistsError(StateError):
    """A run with this number already exists in the workspace."""

    code = "EXISTS"
    default_hint = "Pick an unused run number"
