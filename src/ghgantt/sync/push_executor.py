"""Push of local changes to GitHub.

A push runs through these phases in order:

1. promote milestones: milestone drafts become repository milestones
2. promote drafts: draft tasks become issues in the project (only with
   ``sync.auto_create_issues``), followed by a second pass that links
   sub-issues and blockers once every new identity exists
3. update existing: content, state, project fields and structural changes
   of already-synced issues
4. commit snapshots: touched tasks get fresh snapshots

Failures creating or updating issues propagate. Relationship calls are
best-effort. Because snapshots and ``id_map`` entries record finished work,
re-running after a failure resumes instead of duplicating.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..github.client import GitHubClient, GitHubClientError
from ..github.project import RepositoryMetadata, lookup_identities
from ..github.queries import (
    ADD_BLOCKED_BY,
    ADD_ITEM_TO_PROJECT,
    ADD_SUB_ISSUE,
    CLOSE_ISSUE,
    CREATE_ISSUE,
    REMOVE_BLOCKED_BY,
    REMOVE_SUB_ISSUE,
    REOPEN_ISSUE,
    UPDATE_ISSUE,
    UPDATE_ITEM_FIELD,
)
from ..models import (
    DiffType,
    GanttConfig,
    IdMapping,
    PushResult,
    Snapshot,
    SyncFields,
    SyncState,
    Task,
    TaskDiff,
)
from ..utils.datetime import now_iso
from ..utils.task_id import (
    build_milestone_synthetic_id,
    build_task_id,
    is_draft_task,
    is_milestone_draft_task,
    is_milestone_synthetic_task,
)
from .diff import compute_local_diff
from .hash import extract_sync_fields, hash_sync_fields
from .references import replace_task_id_references
from .type_resolver import resolve_type_option_id

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[list[Task], SyncState], None]


class PushExecutor:
    """Pushes local task changes to a GitHub project."""

    def __init__(
        self,
        client: GitHubClient,
        config: GanttConfig,
        *,
        on_progress: ProgressCallback | None = None,
    ):
        """Initialize the executor.

        Args:
            client: GitHub API client
            config: Project configuration
            on_progress: Called with the working tasks and sync state after
                every identity promotion, so the caller can persist it
        """
        self._client = client
        self._config = config
        self._on_progress = on_progress
        github = config.project.github
        self._owner = github.owner
        self._repo = github.repo
        self._repo_full_name = github.repo_full_name

        # Per-run working state
        self._tasks: list[Task] = []
        self._state = SyncState()
        self._touched: set[str] = set()
        self._retired: set[str] = set()

    def execute(
        self, tasks: list[Task], sync_state: SyncState
    ) -> tuple[PushResult, list[Task], SyncState]:
        """Push every local change.

        The inputs are not modified; the returned tasks and sync state carry
        promoted identities, new ``id_map`` entries and refreshed snapshots.
        """
        result = PushResult()
        self._tasks = [task.model_copy(deep=True) for task in tasks]
        self._state = sync_state.model_copy(deep=True)
        self._touched = set()
        self._retired = set()

        diffs = [
            d
            for d in compute_local_diff(self._tasks, self._state)
            if not is_milestone_synthetic_task(d.id)
        ]
        if not diffs:
            logger.info("Nothing to push")
            return result, self._tasks, self._state

        milestone_diffs = [
            d for d in diffs if d.type != DiffType.DELETED and is_milestone_draft_task(d.task)
        ]
        milestone_ids = {d.id for d in milestone_diffs}
        draft_diffs = [d for d in diffs if is_draft_task(d.id) and d.id not in milestone_ids]
        existing_diffs = [d for d in diffs if not is_draft_task(d.id)]

        # Structural deltas compare against what was synced before this run
        previous_fields = {
            task_id: snapshot.sync_fields for task_id, snapshot in self._state.snapshots.items()
        }

        self._promote_milestones(milestone_diffs, result)
        self._promote_drafts(draft_diffs, result)
        self._update_existing(existing_diffs, previous_fields, result)
        self._commit_snapshots()

        logger.info(
            "Push finished: %d created, %d updated, %d skipped",
            result.created,
            result.updated,
            result.skipped,
        )
        return result, self._tasks, self._state

    # Phase 1: milestones

    def _promote_milestones(self, diffs: list[TaskDiff], result: PushResult) -> None:
        for diff in diffs:
            task = diff.task
            old_id = task.id
            due = task.date or task.end_date
            milestone = self._client.create_milestone(
                self._owner,
                self._repo,
                task.title,
                description=task.body,
                due_on=due.isoformat() if due else None,
            )
            new_id = build_milestone_synthetic_id(self._repo_full_name, milestone["number"])
            logger.info("Created milestone %s for %s", new_id, old_id)
            self._promote(task, new_id)
            result.created += 1

    # Phase 2: drafts

    def _promote_drafts(self, diffs: list[TaskDiff], result: PushResult) -> None:
        if not diffs:
            return
        if not self._config.sync.auto_create_issues:
            logger.info(
                "Skipping %d draft task(s): sync.auto_create_issues is disabled", len(diffs)
            )
            result.skipped += len(diffs)
            return
        self._require_project()

        live = [d for d in diffs if d.type != DiffType.DELETED]
        result.skipped += len(diffs) - len(live)
        if not live:
            return

        logins = [login for d in live for login in d.task.assignees]
        metadata = lookup_identities(self._client, self._owner, self._repo, logins)

        created: list[str] = []
        for diff in live:
            task = diff.task
            old_id = task.id
            mapping = self._create_issue(task, metadata)
            new_id = build_task_id(self._repo_full_name, mapping.issue_number)
            task.github_issue = mapping.issue_number
            task.github_repo = self._repo_full_name
            self._state.id_map[new_id] = mapping
            logger.info("Created issue %s for %s", new_id, old_id)
            self._promote(task, new_id)
            created.append(new_id)
            result.created += 1

        # Parents and blockers may be drafts from this same batch
        by_id = {task.id: task for task in self._tasks}
        for task_id in created:
            task = by_id[task_id]
            if task.parent:
                self._link_sub_issue(task.parent, task.id)
            for dep in task.blocked_by:
                self._link_blocked_by(task.id, dep.task)

    def _create_issue(self, task: Task, metadata: RepositoryMetadata) -> IdMapping:
        """Create the issue for a draft, add it to the project and set its fields."""
        label_ids = []
        for name in task.labels:
            if name in metadata.label_ids:
                label_ids.append(metadata.label_ids[name])
            else:
                logger.warning("Label '%s' does not exist in %s, skipping", name, self._repo_full_name)

        milestone_id = None
        if task.milestone:
            milestone_id = metadata.milestone_ids.get(task.milestone)
            if milestone_id is None:
                logger.warning("Milestone '%s' not found, skipping", task.milestone)

        assignee_ids = [metadata.user_ids[a] for a in task.assignees if a in metadata.user_ids]

        data = self._client.mutate(
            CREATE_ISSUE,
            {
                "repositoryId": metadata.repository_id,
                "title": task.title,
                "body": task.body,
                "labelIds": label_ids,
                "milestoneId": milestone_id,
                "assigneeIds": assignee_ids,
            },
        )
        issue = data["createIssue"]["issue"]

        data = self._client.mutate(
            ADD_ITEM_TO_PROJECT,
            {"projectId": self._state.project_node_id, "contentId": issue["id"]},
        )
        item_id = data["addProjectV2ItemById"]["item"]["id"]

        if task.is_closed:
            self._client.mutate(CLOSE_ISSUE, {"issueId": issue["id"]})

        self._write_project_fields(task, item_id)
        return IdMapping(
            issue_number=issue["number"],
            issue_node_id=issue["id"],
            project_item_id=item_id,
        )

    # Phase 3: existing issues

    def _update_existing(
        self,
        diffs: list[TaskDiff],
        previous_fields: dict[str, SyncFields | None],
        result: PushResult,
    ) -> None:
        for diff in diffs:
            if diff.type == DiffType.DELETED:
                logger.info("Skipping %s: deleting issues is not supported", diff.id)
                result.skipped += 1
                continue

            mapping = self._state.id_map.get(diff.id)
            if mapping is None:
                logger.warning("Skipping %s: no GitHub identifiers recorded, run pull first", diff.id)
                result.skipped += 1
                continue
            self._require_project()

            task = diff.task
            before = previous_fields.get(task.id)

            self._client.mutate(
                UPDATE_ISSUE,
                {"issueId": mapping.issue_node_id, "title": task.title, "body": task.body},
            )
            if before is None or before.state != task.state:
                mutation = CLOSE_ISSUE if task.is_closed else REOPEN_ISSUE
                self._client.mutate(mutation, {"issueId": mapping.issue_node_id})

            self._write_project_fields(task, mapping.project_item_id)
            self._replay_structure(task, before)

            self._touched.add(task.id)
            result.updated += 1
            logger.debug("Updated %s (%s)", task.id, ", ".join(diff.changed_fields or []))

    def _replay_structure(self, task: Task, before: SyncFields | None) -> None:
        """Replay parent and blocked-by changes made since the last sync."""
        old_parent = before.parent if before else None
        if task.parent != old_parent:
            if old_parent:
                self._unlink_sub_issue(old_parent, task.id)
            if task.parent:
                self._link_sub_issue(task.parent, task.id)

        old_blockers = {dep.task for dep in before.blocked_by} if before else set()
        new_blockers = {dep.task for dep in task.blocked_by}
        for blocker in sorted(new_blockers - old_blockers):
            self._link_blocked_by(task.id, blocker)
        for blocker in sorted(old_blockers - new_blockers):
            self._unlink_blocked_by(task.id, blocker)

    # Phase 4: snapshots

    def _commit_snapshots(self) -> None:
        now = now_iso()
        for old_id in self._retired:
            self._state.snapshots.pop(old_id, None)

        for task in self._tasks:
            if task.id in self._touched:
                self._snapshot(task, now)
        self._state.last_synced_at = now

    def _snapshot(self, task: Task, now: str) -> None:
        previous = self._state.snapshots.get(task.id)
        fields = extract_sync_fields(task)
        self._state.snapshots[task.id] = Snapshot(
            hash=hash_sync_fields(fields),
            synced_at=now,
            updated_at=previous.updated_at if previous else None,
            sync_fields=fields,
        )

    # Helpers

    def _promote(self, task: Task, new_id: str) -> None:
        """Give a draft its GitHub identity and rewrite every reference to it.

        The promoted task is snapshotted right away so saved progress never
        shows it as a new task.
        """
        old_id = task.id
        task.id = new_id
        replace_task_id_references(self._tasks, old_id, new_id)
        self._retired.add(old_id)
        self._touched.add(new_id)
        self._snapshot(task, now_iso())
        if self._on_progress is not None:
            self._on_progress(self._tasks, self._state)

    def _require_project(self) -> None:
        if not self._state.project_node_id:
            raise GitHubClientError("Project node ID unknown. Run 'ghgantt pull' first.")

    def _write_project_fields(self, task: Task, item_id: str) -> None:
        """Write dates, type and status to the project item."""
        mapping = self._config.sync.field_mapping

        for field_name, value in (
            (mapping.start_date, task.start_date),
            (mapping.end_date, task.end_date),
        ):
            if value is not None:
                self._set_field(item_id, field_name, {"date": value.isoformat()})

        if mapping.type:
            option_id = resolve_type_option_id(
                task.type, self._config.task_types, mapping.type, self._state.option_ids
            )
            if option_id:
                self._set_field(item_id, mapping.type, {"singleSelectOptionId": option_id})

        status = task.custom_fields.get(mapping.status)
        if isinstance(status, str):
            option_id = self._state.option_ids.get(mapping.status, {}).get(status)
            if option_id:
                self._set_field(item_id, mapping.status, {"singleSelectOptionId": option_id})
            else:
                logger.debug("No option '%s' on field '%s'", status, mapping.status)

    def _set_field(self, item_id: str, field_name: str, value: dict[str, Any]) -> None:
        field_id = self._state.field_ids.get(field_name)
        if not field_id:
            logger.debug("Project has no field '%s', skipping", field_name)
            return
        self._client.mutate(
            UPDATE_ITEM_FIELD,
            {
                "projectId": self._state.project_node_id,
                "itemId": item_id,
                "fieldId": field_id,
                "value": value,
            },
        )

    def _node_ids(self, first: str, second: str) -> tuple[str, str] | None:
        a = self._state.id_map.get(first)
        b = self._state.id_map.get(second)
        if a is None or b is None:
            logger.debug("No issue IDs for %s / %s, skipping relationship", first, second)
            return None
        return a.issue_node_id, b.issue_node_id

    def _best_effort(self, description: str, mutation: str, variables: dict[str, Any]) -> None:
        try:
            self._client.mutate(mutation, variables)
        except GitHubClientError as e:
            logger.warning("Could not %s: %s", description, e)

    def _link_sub_issue(self, parent_id: str, child_id: str) -> None:
        ids = self._node_ids(parent_id, child_id)
        if ids:
            self._best_effort(
                f"add {child_id} as sub-issue of {parent_id}",
                ADD_SUB_ISSUE,
                {"issueId": ids[0], "subIssueId": ids[1]},
            )

    def _unlink_sub_issue(self, parent_id: str, child_id: str) -> None:
        ids = self._node_ids(parent_id, child_id)
        if ids:
            self._best_effort(
                f"remove {child_id} from sub-issues of {parent_id}",
                REMOVE_SUB_ISSUE,
                {"issueId": ids[0], "subIssueId": ids[1]},
            )

    def _link_blocked_by(self, task_id: str, blocker_id: str) -> None:
        ids = self._node_ids(task_id, blocker_id)
        if ids:
            self._best_effort(
                f"mark {task_id} as blocked by {blocker_id}",
                ADD_BLOCKED_BY,
                {"issueId": ids[0], "blockingIssueId": ids[1]},
            )

    def _unlink_blocked_by(self, task_id: str, blocker_id: str) -> None:
        ids = self._node_ids(task_id, blocker_id)
        if ids:
            self._best_effort(
                f"remove {blocker_id} as blocker of {task_id}",
                REMOVE_BLOCKED_BY,
                {"issueId": ids[0], "blockingIssueId": ids[1]},
            )
