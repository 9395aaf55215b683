"""Task domain model."""

import datetime as dt
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, JsonValue

# State constants
STATE_OPEN = "open"
STATE_CLOSED = "closed"

DEFAULT_TASK_TYPE = "task"
MILESTONE_TASK_TYPE = "milestone"

TaskState = Literal["open", "closed"]

# Project field values are strings, numbers, dates (ISO strings), booleans or
# single-select option labels. Anything else the backend sends is kept as-is.
CustomFieldValue = JsonValue


class DependencyType(str, Enum):
    """Scheduling relationship between a task and the task blocking it."""

    FINISH_TO_START = "finish-to-start"
    FINISH_TO_FINISH = "finish-to-finish"
    START_TO_START = "start-to-start"
    START_TO_FINISH = "start-to-finish"


class Dependency(BaseModel):
    """A blocking edge: this task is blocked by `task`."""

    task: str
    type: DependencyType = DependencyType.FINISH_TO_START
    lag: int = 0


class Task(BaseModel):
    """A unit of work or milestone in the local task repository.

    Identity is one of:
    - ``owner/repo#123`` for a GitHub issue
    - ``owner/repo#draft-1`` for a locally created task not yet pushed
    - ``milestone:owner/repo#4`` for a synthetic task mirrored from a milestone
    """

    id: str
    type: str = DEFAULT_TASK_TYPE
    github_issue: int | None = None
    github_repo: str = ""

    # Hierarchy
    parent: str | None = None
    sub_tasks: list[str] = Field(default_factory=list)

    # Content
    title: str = ""
    body: str | None = None
    state: TaskState = STATE_OPEN
    state_reason: str | None = None
    assignees: list[str] = Field(default_factory=list)
    labels: list[str] = Field(default_factory=list)
    milestone: str | None = None  # Milestone title, not its number

    # Provenance (read-only, never hashed)
    linked_prs: list[int] = Field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None
    closed_at: str | None = None

    custom_fields: dict[str, CustomFieldValue] = Field(default_factory=dict)

    # Schedule
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    date: dt.date | None = None  # Single point in time (milestones)
    blocked_by: list[Dependency] = Field(default_factory=list)

    @property
    def is_closed(self) -> bool:
        return self.state == STATE_CLOSED


class TasksFile(BaseModel):
    """Top-level document of the local task store."""

    tasks: list[Task] = Field(default_factory=list)
