"""Sync-related data models.

Persisted records (``SyncFields``, ``Snapshot``, ``IdMapping``, ``SyncState``)
are pydantic models stored in ``.gantt/sync-state.json``. Per-run results
(``TaskDiff``, ``Conflict``, ``PushResult``, ``PullResult``) are plain
dataclasses and are never written to disk.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .task import CustomFieldValue, Dependency, Task, TaskState


class SyncFields(BaseModel):
    """Canonical projection of the sync-relevant fields of a task.

    Lists are sorted and ``blocked_by`` is ordered by its ``task`` reference,
    so two projections of the same content compare equal.
    """

    title: str
    body: str | None
    state: TaskState
    type: str
    assignees: list[str]
    labels: list[str]
    milestone: str | None
    custom_fields: dict[str, CustomFieldValue]
    parent: str | None
    sub_tasks: list[str]
    start_date: dt.date | None
    end_date: dt.date | None
    date: dt.date | None
    blocked_by: list[Dependency]


class Snapshot(BaseModel):
    """Last agreed-upon state of one task."""

    model_config = ConfigDict(populate_by_name=True)

    hash: str
    synced_at: str
    updated_at: str | None = None  # Remote updatedAt at sync time
    sync_fields: SyncFields | None = Field(default=None, alias="syncFields")
    remote_hash: str | None = Field(default=None, alias="remoteHash")


class IdMapping(BaseModel):
    """GitHub identifiers for a synced issue."""

    issue_number: int
    issue_node_id: str
    project_item_id: str


class SyncState(BaseModel):
    """Process-spanning sync bookkeeping for one project root."""

    last_synced_at: str | None = None
    project_node_id: str = ""
    id_map: dict[str, IdMapping] = Field(default_factory=dict)
    field_ids: dict[str, str] = Field(default_factory=dict)  # field name -> field id
    snapshots: dict[str, Snapshot] = Field(default_factory=dict)
    option_ids: dict[str, dict[str, str]] = Field(default_factory=dict)  # field -> option -> id


class DiffType(str, Enum):
    """Classification of a local change."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"


class GateDecision(str, Enum):
    """Outcome of the conflict confirmation gate."""

    PROCEED = "proceed"
    ABORT = "abort"


@dataclass
class TaskDiff:
    """A local change detected against the last snapshot."""

    id: str
    type: DiffType
    task: Task
    changed_fields: list[str] | None = None


@dataclass
class FieldDetail:
    """Three-way value of one conflicting field."""

    field: str
    local: Any
    remote: Any
    snapshot: Any


@dataclass
class Conflict:
    """A task changed both locally and remotely since the last sync."""

    task_id: str
    title: str
    local_hash: str
    remote_hash: str
    snapshot_hash: str
    local_changed_fields: list[str] = field(default_factory=list)
    remote_changed_fields: list[str] = field(default_factory=list)
    field_details: list[FieldDetail] = field(default_factory=list)

    def detail_for(self, field_name: str) -> FieldDetail | None:
        """Return the three-way detail for a field, if recorded."""
        for detail in self.field_details:
            if detail.field == field_name:
                return detail
        return None


@dataclass
class PushResult:
    """Result of a push operation."""

    created: int = 0  # Drafts and milestones created on GitHub
    updated: int = 0  # Existing issues updated
    skipped: int = 0  # Diffs that could not or should not be pushed
    dry_run: bool = False

    @property
    def has_changes(self) -> bool:
        """Whether anything was written to GitHub."""
        return self.created > 0 or self.updated > 0


@dataclass
class PullResult:
    """Result of a pull operation."""

    added: int = 0
    updated: int = 0
    removed: int = 0
    changes: list[TaskDiff] = field(default_factory=list)  # What was (or would be) applied
    conflicts: list[Conflict] = field(default_factory=list)
    aborted: bool = False  # Conflicts detected and the gate said abort
    up_to_date: bool = False  # Short-circuited: nothing changed remotely
    dry_run: bool = False

    @property
    def has_changes(self) -> bool:
        """Whether the pull changed the local task set."""
        return (self.added + self.updated + self.removed) > 0
