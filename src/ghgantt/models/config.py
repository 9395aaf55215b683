"""Configuration models for .gantt/config.yml."""

import re
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from .task import DEFAULT_TASK_TYPE, MILESTONE_TASK_TYPE

TaskDisplay = Literal["bar", "summary", "milestone"]
ConflictStrategy = Literal["remote-wins", "local-wins", "manual"]

DEFAULT_DONE_STATUS_NAMES = ("done", "completed", "closed", "finished")
DEFAULT_STARTS_WORK_STATUS_NAMES = ("in progress", "in review", "active", "working")


def _validate_color(v: str) -> str:
    """Validate color is a valid named color or hex code."""
    if v.startswith("#"):
        hex_part = v[1:]
        if len(hex_part) not in (3, 6):
            raise ValueError("Hex color must be 3 or 6 characters (e.g., #fff or #ffffff)")
        if not all(c in "0123456789abcdefABCDEF" for c in hex_part):
            raise ValueError("Invalid hex color code")
    return v


class GitHubProjectConfig(BaseModel):
    """Where the project lives on GitHub."""

    owner: str = Field(..., min_length=1)
    repo: str = Field(..., min_length=1)
    project_number: int = Field(..., ge=1)
    owner_type: Literal["user", "organization"] = "user"
    base_url: str = Field(
        default="api.github.com",
        description="API host (use a custom host for GitHub Enterprise)",
    )

    @field_validator("owner", "repo")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Owner and repo are single path segments."""
        if "/" in v or "#" in v:
            raise ValueError(f"'{v}' must not contain '/' or '#'")
        return v

    @property
    def repo_full_name(self) -> str:
        """Repository as owner/repo."""
        return f"{self.owner}/{self.repo}"


class ProjectConfig(BaseModel):
    """Project identification."""

    name: str = ""
    github: GitHubProjectConfig


class FieldMapping(BaseModel):
    """Names of the GitHub project fields the engine reads and writes."""

    start_date: str = "Start Date"
    end_date: str = "End Date"
    status: str = "Status"
    type: str | None = None  # Single-select field holding the task type


class SyncConfig(BaseModel):
    """Sync behaviour."""

    conflict_strategy: ConflictStrategy = "remote-wins"
    auto_create_issues: bool = False
    field_mapping: FieldMapping = Field(default_factory=FieldMapping)


class TaskTypeConfig(BaseModel):
    """Configuration for a single task type."""

    label: str = Field(..., min_length=1)
    display: TaskDisplay = "bar"
    color: str = Field(default="#27AE60", description="Named color or hex code")
    github_label: str | None = None
    github_field_value: str | None = None

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        """Validate color is a valid named color or hex code."""
        return _validate_color(v)


class StatusValueConfig(BaseModel):
    """Configuration for a single status option.

    ``done`` and ``starts_work`` describe the option for Gantt editors (which
    statuses finish a bar, which start one). Sync carries the status name
    through unchanged and does not read them.
    """

    color: str = "#3498DB"
    done: bool = False
    starts_work: bool = False

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        """Validate color is a valid named color or hex code."""
        return _validate_color(v)


class StatusesConfig(BaseModel):
    """Status field and its known options."""

    field_name: str = "Status"
    values: dict[str, StatusValueConfig] = Field(default_factory=dict)


class GanttConfig(BaseModel):
    """Root configuration model for .gantt/config.yml."""

    version: str = "1"
    project: ProjectConfig
    sync: SyncConfig = Field(default_factory=SyncConfig)
    task_types: dict[str, TaskTypeConfig] = Field(default_factory=dict)
    statuses: StatusesConfig = Field(default_factory=StatusesConfig)

    @field_validator("task_types")
    @classmethod
    def validate_task_type_names(
        cls, v: dict[str, TaskTypeConfig]
    ) -> dict[str, TaskTypeConfig]:
        """Type names are lowercase identifiers."""
        for name in v:
            if not re.fullmatch(r"[a-z][a-z0-9_-]*", name):
                raise ValueError(
                    f"Task type '{name}' must be lowercase letters, numbers, '-' or '_'"
                )
        return v

    @property
    def type_field_configured(self) -> bool:
        """Whether task types are backed by a project custom field."""
        return bool(self.sync.field_mapping.type)

    def get_task_type(self, name: str) -> TaskTypeConfig | None:
        """Get task type config by name."""
        return self.task_types.get(name)

    @classmethod
    def default(
        cls,
        owner: str,
        repo: str,
        project_number: int,
        owner_type: Literal["user", "organization"] = "user",
        field_mapping: FieldMapping | None = None,
    ) -> "GanttConfig":
        """Create the configuration written by ``ghgantt init``."""
        return cls(
            project=ProjectConfig(
                name=f"{owner}/{repo}",
                github=GitHubProjectConfig(
                    owner=owner,
                    repo=repo,
                    project_number=project_number,
                    owner_type=owner_type,
                ),
            ),
            sync=SyncConfig(field_mapping=field_mapping or FieldMapping()),
            task_types={
                DEFAULT_TASK_TYPE: TaskTypeConfig(label="Task"),
                MILESTONE_TASK_TYPE: TaskTypeConfig(
                    label="Milestone", display="milestone", color="#E74C3C"
                ),
            },
        )

    def detect_statuses(self, option_names: list[str]) -> None:
        """Fill status values from the options of the status field."""
        for name in option_names:
            if name in self.statuses.values:
                continue
            lower = name.lower()
            self.statuses.values[name] = StatusValueConfig(
                done=lower in DEFAULT_DONE_STATUS_NAMES,
                starts_work=lower in DEFAULT_STARTS_WORK_STATUS_NAMES,
            )
