"""Validated, atomic persistence of workspace records.

Every write validates the record before any disk access, then goes
through a temp file + rename so readers never observe a torn file.
Every read distinguishes a missing file, unparseable content and a
schema violation.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from deepfield.exceptions import (
    CorruptedStateError,
    FileOperationError,
    InvalidStateError,
    MissingStateError,
    PermissionDeniedError,
    ValidationIssue,
)
from deepfield.state.layout import project_config_path, run_config_path
from deepfield.state.schemas import ProjectConfig, RunConfig, utc_now
from deepfield.utils.fileops import atomic_json_write

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_LABELS: dict[type[BaseModel], str] = {
    ProjectConfig: "project configuration",
    RunConfig: "run configuration",
}


def _label(model: type[BaseModel]) -> str:
    return _LABELS.get(model, model.__name__)


def _issues(error: ValidationError) -> list[ValidationIssue]:
    return [
        ValidationIssue(
            location=".".join(str(part) for part in err["loc"]),
            message=err["msg"],
        )
        for err in error.errors()
    ]


def validate_record(record: BaseModel | Mapping[str, Any], model: type[M]) -> M:
    """Validate a record against ``model`` without touching disk.

    Args:
        record: A model instance or a mapping using on-disk (camelCase)
            or Python (snake_case) key names.
        model: Schema to validate against.

    Returns:
        A freshly validated instance.

    Raises:
        InvalidStateError: If the record violates the schema.
    """
    data = record.model_dump(by_alias=True) if isinstance(record, BaseModel) else record
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidStateError(f"Invalid {_label(model)}", issues=_issues(e)) from e


def read_record(path: Path, model: type[M]) -> M:
    """Read and validate a JSON record.

    Raises:
        MissingStateError: If the file does not exist.
        CorruptedStateError: If the content is not valid UTF-8 JSON.
        InvalidStateError: If the content violates the schema.
        PermissionDeniedError: If the file cannot be read.
        FileOperationError: For any other read failure.
    """
    path = Path(path)
    label = _label(model)

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise MissingStateError(f"{label.capitalize()} not found: {path}") from e
    except PermissionError as e:
        raise PermissionDeniedError(f"Permission denied reading {path}", path) from e
    except UnicodeDecodeError as e:
        raise CorruptedStateError(f"Corrupted {label}: {path}", details=str(e)) from e
    except OSError as e:
        raise FileOperationError(
            f"Failed to read {label}: {path}", operation="read", details=str(e)
        ) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CorruptedStateError(f"Corrupted {label}: {path}", details=str(e)) from e

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidStateError(f"Invalid {label}: {path}", issues=_issues(e)) from e


def _stamp_last_modified(record: BaseModel | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(record, BaseModel):
        data = record.model_dump(by_alias=True)
    else:
        data = {k: v for k, v in record.items() if k not in ("last_modified", "lastModified")}
    data["lastModified"] = utc_now()
    return data


def write_record(path: Path, record: BaseModel | Mapping[str, Any], model: type[M]) -> M:
    """Validate ``record`` and write it atomically as pretty-printed JSON.

    A project configuration always gets ``lastModified`` stamped with the
    current time; any caller-supplied value is ignored.

    Returns:
        The validated record as written.

    Raises:
        InvalidStateError: If validation fails (nothing is written).
        PermissionDeniedError: If the target is not writable.
        FileOperationError: For any other write failure.
    """
    if issubclass(model, ProjectConfig):
        record = _stamp_last_modified(record)
    validated = validate_record(record, model)
    atomic_json_write(Path(path), validated.to_dict())
    logger.debug(f"Wrote {_label(model)} to {path}")
    return validated


def update_record(path: Path, updates: Mapping[str, Any], model: type[M]) -> M:
    """Merge ``updates`` (on-disk key names) into an existing record and rewrite it.

    Raises:
        MissingStateError: If there is no record to update.
        InvalidStateError: If the merged record violates the schema.
    """
    current = read_record(path, model)
    merged = {**current.model_dump(by_alias=True), **updates}
    return write_record(path, merged, model)


def read_project_config(workspace_dir: Path) -> ProjectConfig:
    """Read deepfield/project.config.json."""
    return read_record(project_config_path(workspace_dir), ProjectConfig)


def write_project_config(
    workspace_dir: Path,
    config: ProjectConfig | Mapping[str, Any],
) -> ProjectConfig:
    """Write the project configuration, stamping ``lastModified`` with now."""
    return write_record(project_config_path(workspace_dir), config, ProjectConfig)


def read_run_config(workspace_dir: Path, run_number: int) -> RunConfig:
    """Read deepfield/wip/run-N/run-N.config.json."""
    return read_record(run_config_path(workspace_dir, run_number), RunConfig)


def write_run_config(workspace_dir: Path, config: RunConfig | Mapping[str, Any]) -> RunConfig:
    """Validate and write a run configuration to its run directory."""
    validated = validate_record(config, RunConfig)
    return write_record(
        run_config_path(workspace_dir, validated.run_number), validated, RunConfig
    )
