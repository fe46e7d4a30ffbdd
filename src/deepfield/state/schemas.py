"""Record schemas for Deepfield workspace state.

ProjectConfig is stored in deepfield/project.config.json and RunConfig in
deepfield/wip/run-N/run-N.config.json. Keys are camelCase on disk and
snake_case in Python.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

SCHEMA_VERSION = "1.0.0"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class RunStatus(str, Enum):
    """Status of one exploration run."""

    INITIALIZED = "initialized"
    SCANNING = "scanning"
    ANALYZING = "analyzing"
    LEARNING = "learning"
    COMPLETED = "completed"
    PAUSED = "paused"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.COMPLETED, RunStatus.FAILED)


class ProjectType(str, Enum):
    """Kind of exploration project."""

    LEGACY_BROWNFIELD = "legacy-brownfield"
    TEAM_ONBOARDING = "team-onboarding"
    DOCUMENTATION = "documentation"
    MODERNIZATION = "modernization"
    INTEGRATION = "integration"
    OTHER = "other"


class FocusArea(str, Enum):
    """Area an exploration can concentrate on."""

    ARCHITECTURE = "architecture"
    DATA_MODELS = "data-models"
    BUSINESS_LOGIC = "business-logic"
    APIS = "apis"
    SECURITY = "security"
    PERFORMANCE = "performance"
    TESTING = "testing"
    DEPLOYMENT = "deployment"


class _Record(BaseModel):
    """Base for persisted records: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary with on-disk key names."""
        return self.model_dump(mode="json", by_alias=True)


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value


class Repository(_Record):
    """One source tree tracked under the project."""

    name: StrictStr
    path: StrictStr
    is_git: StrictBool


class ProjectConfig(_Record):
    """Project-level configuration, one per workspace."""

    version: StrictStr
    project_name: StrictStr
    goal: StrictStr
    project_type: StrictStr | None = None
    focus_areas: list[StrictStr] = Field(default_factory=list)
    repositories: list[Repository] = Field(default_factory=list)
    created_at: AwareDatetime
    last_modified: AwareDatetime

    @field_validator("project_name", "goal")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        return _require_text(value)

    @model_validator(mode="after")
    def _modified_after_created(self) -> ProjectConfig:
        if self.last_modified < self.created_at:
            raise ValueError("lastModified must not be earlier than createdAt")
        return self


class RunConfig(_Record):
    """State of one exploration run."""

    run_number: StrictInt = Field(ge=0)
    status: RunStatus
    started_at: AwareDatetime
    completed_at: AwareDatetime | None = None
    source_snapshot: dict[StrictStr, StrictStr] = Field(default_factory=dict)
    changes_detected: StrictBool = False
    learning_generated: StrictBool = False

    @model_validator(mode="after")
    def _completion_consistent(self) -> RunConfig:
        if self.completed_at is not None:
            if not self.status.is_terminal:
                raise ValueError(
                    f"completedAt is only allowed once a run is completed or failed "
                    f"(status is '{self.status.value}')"
                )
            if self.completed_at < self.started_at:
                raise ValueError("completedAt must not be earlier than startedAt")
        return self


class StartAnswers(_Record):
    """Answers for non-interactive project configuration."""

    project_name: StrictStr
    project_type: ProjectType = ProjectType.OTHER
    goal: StrictStr
    focus_areas: list[FocusArea] = Field(default_factory=list)
    max_runs: StrictInt = Field(default=5, ge=1, le=999)

    @field_validator("project_name", "goal")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        return _require_text(value)
