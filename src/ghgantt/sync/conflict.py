"""Three-way conflict detection between local, remote and snapshot."""

from __future__ import annotations

import logging

from ..models import Conflict, FieldDetail, Snapshot, SyncFields, SyncState, Task
from .hash import SYNC_FIELD_NAMES, changed_fields, extract_sync_fields, hash_sync_fields
from .mapper import merge_remote_sync_fields

logger = logging.getLogger(__name__)


def remote_view(
    snapshot: Snapshot, remote: Task, *, type_field_configured: bool = False
) -> SyncFields | None:
    """Remote fields as a remote-wins merge onto the snapshot would leave them.

    Local-only metadata (``blocked_by`` type and lag, and the task type when no
    type field is configured) is taken from the snapshot, since GitHub never
    holds it. Returns None for snapshots without cached fields.
    """
    if snapshot.sync_fields is None:
        return None
    return merge_remote_sync_fields(
        snapshot.sync_fields,
        extract_sync_fields(remote),
        type_field_configured=type_field_configured,
    )


def remote_has_changed(
    snapshot: Snapshot, remote: Task, *, type_field_configured: bool = False
) -> bool:
    """Whether GitHub moved away from the last synced state of a task.

    Snapshots without cached fields compare the raw remote hash against the
    recorded remote hash, or the snapshot hash when none was recorded.
    """
    view = remote_view(snapshot, remote, type_field_configured=type_field_configured)
    if view is not None:
        return hash_sync_fields(view) != snapshot.hash
    baseline = snapshot.remote_hash or snapshot.hash
    return hash_sync_fields(extract_sync_fields(remote)) != baseline


def detect_conflicts(
    local_tasks: list[Task],
    remote_tasks: list[Task],
    sync_state: SyncState,
    *,
    type_field_configured: bool = False,
) -> list[Conflict]:
    """Find tasks changed on both sides since the last sync.

    A task conflicts only when its local hash differs from the snapshot hash
    and the remote has changed as ``remote_has_changed`` sees it. Tasks
    without a remote counterpart or without a snapshot have no common
    ancestor and are never reported.
    """
    conflicts: list[Conflict] = []
    remote_by_id = {task.id: task for task in remote_tasks}

    for local in local_tasks:
        remote = remote_by_id.get(local.id)
        if remote is None:
            continue

        snapshot = sync_state.snapshots.get(local.id)
        if snapshot is None:
            continue

        local_fields = extract_sync_fields(local)
        local_hash = hash_sync_fields(local_fields)
        if local_hash == snapshot.hash:
            continue
        if not remote_has_changed(snapshot, remote, type_field_configured=type_field_configured):
            continue

        conflict = Conflict(
            task_id=local.id,
            title=local.title,
            local_hash=local_hash,
            remote_hash=hash_sync_fields(extract_sync_fields(remote)),
            snapshot_hash=snapshot.hash,
        )

        # Snapshots written before field caching existed carry no values to
        # compare against; the conflict is still reported, without detail.
        base = snapshot.sync_fields
        remote_fields = remote_view(snapshot, remote, type_field_configured=type_field_configured)
        if base is not None and remote_fields is not None:
            conflict.local_changed_fields = changed_fields(base, local_fields)
            conflict.remote_changed_fields = changed_fields(base, remote_fields)
            touched = set(conflict.local_changed_fields) | set(conflict.remote_changed_fields)

            local_data = local_fields.model_dump(mode="json")
            remote_data = remote_fields.model_dump(mode="json")
            base_data = base.model_dump(mode="json")
            conflict.field_details = [
                FieldDetail(
                    field=name,
                    local=local_data[name],
                    remote=remote_data[name],
                    snapshot=base_data[name],
                )
                for name in SYNC_FIELD_NAMES
                if name in touched
            ]

        logger.debug(
            "Conflict on %s: local=%s remote=%s",
            local.id,
            conflict.local_changed_fields,
            conflict.remote_changed_fields,
        )
        conflicts.append(conflict)

    return conflicts
