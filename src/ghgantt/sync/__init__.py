"""Synchronization between the local task repository and GitHub Projects."""

from .conflict import detect_conflicts
from .diff import compute_local_diff, estimate_api_calls
from .engine import GanttSyncEngine
from .gate import ConfirmationGate, confirm_conflicts
from .hash import extract_sync_fields, hash_sync_fields, hash_task
from .mapper import merge_remote_into_local
from .pull import PullOrchestrator
from .push_executor import PushExecutor
from .references import replace_task_id_references

__all__ = [
    "ConfirmationGate",
    "GanttSyncEngine",
    "PullOrchestrator",
    "PushExecutor",
    "compute_local_diff",
    "confirm_conflicts",
    "detect_conflicts",
    "estimate_api_calls",
    "extract_sync_fields",
    "hash_sync_fields",
    "hash_task",
    "merge_remote_into_local",
    "replace_task_id_references",
]
