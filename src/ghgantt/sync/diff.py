"""Local change detection against the last-synced snapshots."""

from __future__ import annotations

import logging

from ..models import DiffType, SyncState, Task, TaskDiff
from ..utils.task_id import is_draft_task, is_milestone_draft_task, is_milestone_synthetic_task
from .hash import changed_fields, extract_sync_fields, hash_sync_fields

logger = logging.getLogger(__name__)

# Rough GitHub call counts per change, for previews only
MILESTONE_CREATE_CALLS = 1
DRAFT_CREATE_CALLS = 6  # create + add to project + field writes
UPDATE_CALLS = 5


def compute_local_diff(tasks: list[Task], sync_state: SyncState) -> list[TaskDiff]:
    """Classify every local task as added, modified or deleted.

    Output order is the input task order followed by deleted IDs in snapshot
    order, so a dry-run preview and the real run report identically.
    """
    diffs: list[TaskDiff] = []

    for task in tasks:
        snapshot = sync_state.snapshots.get(task.id)
        if snapshot is None:
            diffs.append(TaskDiff(id=task.id, type=DiffType.ADDED, task=task))
            continue

        current = extract_sync_fields(task)
        if hash_sync_fields(current) == snapshot.hash:
            continue

        fields = changed_fields(snapshot.sync_fields, current) if snapshot.sync_fields else None
        diffs.append(
            TaskDiff(id=task.id, type=DiffType.MODIFIED, task=task, changed_fields=fields)
        )

    local_ids = {task.id for task in tasks}
    for task_id in sync_state.snapshots:
        if task_id not in local_ids:
            diffs.append(TaskDiff(id=task_id, type=DiffType.DELETED, task=Task(id=task_id)))

    logger.debug("Local diff: %d change(s) across %d task(s)", len(diffs), len(tasks))
    return diffs


def estimate_api_calls(diffs: list[TaskDiff]) -> int:
    """Coarse estimate of the GitHub calls a push of these diffs would make."""
    total = 0
    for diff in diffs:
        if diff.type == DiffType.DELETED or is_milestone_synthetic_task(diff.id):
            continue
        if is_milestone_draft_task(diff.task):
            total += MILESTONE_CREATE_CALLS
        elif is_draft_task(diff.id):
            total += DRAFT_CREATE_CALLS
        else:
            total += UPDATE_CALLS
    return total
