"""Content hashing of the sync-relevant fields of a task.

Only fields that are synchronized in both directions take part. Provenance
fields (created_at, updated_at, closed_at, linked_prs, GitHub identifiers)
are left out so that churn in them never shows up as a change.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from ..models import SyncFields, Task

SYNC_FIELD_NAMES: tuple[str, ...] = tuple(SyncFields.model_fields)


def extract_sync_fields(task: Task) -> SyncFields:
    """Project a task onto its canonical, order-independent sync fields."""
    return SyncFields(
        title=task.title,
        body=task.body,
        state=task.state,
        type=task.type,
        assignees=sorted(task.assignees),
        labels=sorted(task.labels),
        milestone=task.milestone,
        custom_fields={key: task.custom_fields[key] for key in sorted(task.custom_fields)},
        parent=task.parent,
        sub_tasks=sorted(task.sub_tasks),
        start_date=task.start_date,
        end_date=task.end_date,
        date=task.date,
        blocked_by=[dep.model_copy() for dep in sorted(task.blocked_by, key=lambda d: d.task)],
    )


def _canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def hash_sync_fields(fields: SyncFields) -> str:
    """SHA-256 hex digest of the canonical JSON form of the sync fields."""
    payload = _canonical_json(fields.model_dump(mode="json"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def hash_task(task: Task) -> str:
    """Hash only the bidirectional sync fields of a task."""
    return hash_sync_fields(extract_sync_fields(task))


def changed_fields(before: SyncFields, after: SyncFields) -> list[str]:
    """Names of the sync fields whose values differ, in declaration order."""
    before_data = before.model_dump(mode="json")
    after_data = after.model_dump(mode="json")
    return [
        name
        for name in SYNC_FIELD_NAMES
        if _canonical_json(before_data[name]) != _canonical_json(after_data[name])
    ]
