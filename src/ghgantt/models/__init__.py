"""Data models."""

from .comments import Comment, CommentsFile
from .config import (
    FieldMapping,
    GanttConfig,
    GitHubProjectConfig,
    ProjectConfig,
    StatusesConfig,
    StatusValueConfig,
    SyncConfig,
    TaskTypeConfig,
)
from .sync import (
    Conflict,
    DiffType,
    FieldDetail,
    GateDecision,
    IdMapping,
    PullResult,
    PushResult,
    Snapshot,
    SyncFields,
    SyncState,
    TaskDiff,
)
from .task import (
    DEFAULT_TASK_TYPE,
    MILESTONE_TASK_TYPE,
    STATE_CLOSED,
    STATE_OPEN,
    Dependency,
    DependencyType,
    Task,
    TasksFile,
)

__all__ = [
    "DEFAULT_TASK_TYPE",
    "MILESTONE_TASK_TYPE",
    "STATE_CLOSED",
    "STATE_OPEN",
    "Comment",
    "CommentsFile",
    "Conflict",
    "Dependency",
    "DependencyType",
    "DiffType",
    "FieldDetail",
    "FieldMapping",
    "GanttConfig",
    "GateDecision",
    "GitHubProjectConfig",
    "IdMapping",
    "ProjectConfig",
    "PullResult",
    "PushResult",
    "Snapshot",
    "StatusValueConfig",
    "StatusesConfig",
    "SyncConfig",
    "SyncFields",
    "SyncState",
    "Task",
    "TaskDiff",
    "TaskTypeConfig",
    "TasksFile",
]
