"""Pull of remote project state into the local task set."""

from __future__ import annotations

import logging

from ..github.client import GitHubClient
from ..github.project import (
    RawProject,
    fetch_all_relationship_links,
    fetch_project,
    fetch_repository_milestones,
)
from ..models import (
    DiffType,
    GanttConfig,
    GateDecision,
    IdMapping,
    PullResult,
    Snapshot,
    SyncState,
    Task,
    TaskDiff,
)
from ..utils.datetime import now_iso
from ..utils.task_id import build_task_id, is_draft_task
from .conflict import detect_conflicts, remote_has_changed
from .gate import ConfirmationGate, confirm_conflicts
from .hash import extract_sync_fields, hash_sync_fields, hash_task
from .mapper import (
    apply_blocked_by_links,
    apply_sub_issue_links,
    map_remote_item_to_task,
    merge_remote_into_local,
    milestone_to_task,
)

logger = logging.getLogger(__name__)


class PullOrchestrator:
    """Fetches a GitHub project and merges it into local tasks."""

    def __init__(self, client: GitHubClient, config: GanttConfig):
        self._client = client
        self._config = config

    def fetch_remote(self) -> tuple[RawProject, list[Task]]:
        """Fetch project issues and repository milestones as tasks.

        Relationships are not included; see ``fetch_relationships``.
        """
        github = self._config.project.github
        project = fetch_project(self._client, github.owner, github.project_number, github.owner_type)

        remote_tasks: list[Task] = []
        for item in project.items:
            task = map_remote_item_to_task(item, self._config)
            if task is not None:
                remote_tasks.append(task)

        for milestone in fetch_repository_milestones(self._client, github.owner, github.repo):
            remote_tasks.append(milestone_to_task(milestone, github.repo_full_name))

        return project, remote_tasks

    def fetch_relationships(self, remote_tasks: list[Task]) -> None:
        """Fill ``parent``, ``sub_tasks`` and ``blocked_by`` on remote issue tasks."""
        issues = [
            (task.github_repo, task.github_issue)
            for task in remote_tasks
            if task.github_issue is not None
        ]
        sub_links, blocked_links = fetch_all_relationship_links(self._client, issues)
        apply_sub_issue_links(remote_tasks, sub_links)
        apply_blocked_by_links(remote_tasks, blocked_links)

    def pull(
        self,
        local_tasks: list[Task],
        sync_state: SyncState,
        gate: ConfirmationGate,
        *,
        force: bool = False,
        dry_run: bool = False,
        with_comments: bool = False,
    ) -> tuple[PullResult, list[Task], SyncState]:
        """Merge the remote project into ``local_tasks``.

        Returns the result together with the new task list and sync state. On
        dry run, abort or an up-to-date short-circuit the inputs come back
        unchanged.
        """
        result = PullResult(dry_run=dry_run)
        project, remote_tasks = self.fetch_remote()
        logger.info("Fetched %d task(s) from GitHub", len(remote_tasks))

        if not with_comments and self._is_up_to_date(local_tasks, remote_tasks, sync_state):
            logger.info("Already up to date")
            result.up_to_date = True
            return result, local_tasks, sync_state

        self.fetch_relationships(remote_tasks)

        conflicts = detect_conflicts(
            local_tasks,
            remote_tasks,
            sync_state,
            type_field_configured=self._config.type_field_configured,
        )
        result.conflicts = conflicts
        if conflicts:
            decision = confirm_conflicts(conflicts, gate, force=force, dry_run=dry_run)
            if decision == GateDecision.ABORT:
                logger.info("Pull aborted, no changes applied")
                result.aborted = True
                return result, local_tasks, sync_state

        new_tasks, new_state = self._merge(local_tasks, remote_tasks, sync_state, result)
        logger.info("Pull summary: +%d ~%d -%d", result.added, result.updated, result.removed)

        if dry_run:
            return result, local_tasks, sync_state

        self._refresh_project_metadata(project, new_state)
        return result, new_tasks, new_state

    def _is_up_to_date(
        self, local_tasks: list[Task], remote_tasks: list[Task], sync_state: SyncState
    ) -> bool:
        """Same identities on both sides and no remote ``updated_at`` has moved."""
        local_ids = {task.id for task in local_tasks if not is_draft_task(task.id)}
        if local_ids != {task.id for task in remote_tasks}:
            return False
        for task in remote_tasks:
            snapshot = sync_state.snapshots.get(task.id)
            if snapshot is None or snapshot.updated_at is None:
                return False
            if snapshot.updated_at != task.updated_at:
                return False
        return True

    def _merge(
        self,
        local_tasks: list[Task],
        remote_tasks: list[Task],
        sync_state: SyncState,
        result: PullResult,
    ) -> tuple[list[Task], SyncState]:
        state = sync_state.model_copy(deep=True)
        now = now_iso()
        local_by_id = {task.id: task for task in local_tasks}
        remote_ids = {task.id for task in remote_tasks}
        new_tasks: list[Task] = []

        for remote in remote_tasks:
            local = local_by_id.get(remote.id)
            remote_hash = hash_task(remote)

            if local is None:
                new_tasks.append(remote)
                state.snapshots[remote.id] = _fresh_snapshot(remote, remote, remote_hash, now)
                result.added += 1
                result.changes.append(TaskDiff(id=remote.id, type=DiffType.ADDED, task=remote))
                continue

            snapshot = state.snapshots.get(remote.id)
            if snapshot is None or remote_has_changed(
                snapshot, remote, type_field_configured=self._config.type_field_configured
            ):
                merged = merge_remote_into_local(
                    local, remote, type_field_configured=self._config.type_field_configured
                )
                new_tasks.append(merged)
                state.snapshots[remote.id] = _fresh_snapshot(merged, remote, remote_hash, now)
                result.updated += 1
                result.changes.append(TaskDiff(id=remote.id, type=DiffType.MODIFIED, task=merged))
            else:
                # Remote unchanged: keep local edits for the next push
                new_tasks.append(local)
                snapshot.updated_at = remote.updated_at

        for local in local_tasks:
            if local.id in remote_ids:
                continue
            if is_draft_task(local.id):
                new_tasks.append(local)
                continue
            state.snapshots.pop(local.id, None)
            state.id_map.pop(local.id, None)
            result.removed += 1
            result.changes.append(TaskDiff(id=local.id, type=DiffType.DELETED, task=local))

        state.last_synced_at = now
        return new_tasks, state

    def _refresh_project_metadata(self, project: RawProject, state: SyncState) -> None:
        state.project_node_id = project.node_id
        state.field_ids = project.field_ids
        state.option_ids = project.option_ids
        for item in project.items:
            issue = item.content
            if issue is None:
                continue
            state.id_map[build_task_id(issue.repository, issue.number)] = IdMapping(
                issue_number=issue.number,
                issue_node_id=issue.node_id,
                project_item_id=item.id,
            )


def _fresh_snapshot(task: Task, remote: Task, remote_hash: str, now: str) -> Snapshot:
    fields = extract_sync_fields(task)
    return Snapshot(
        hash=hash_sync_fields(fields),
        synced_at=now,
        updated_at=remote.updated_at,
        sync_fields=fields,
        remote_hash=remote_hash,
    )
