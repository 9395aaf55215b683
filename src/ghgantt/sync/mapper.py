"""Mapping between GitHub records and local tasks, and the remote-into-local merge."""

from __future__ import annotations

import logging

from ..github.project import BlockedByLink, RawMilestone, RawProjectItem, SubIssueLink
from ..models import (
    MILESTONE_TASK_TYPE,
    STATE_CLOSED,
    STATE_OPEN,
    Dependency,
    GanttConfig,
    SyncFields,
    Task,
)
from ..utils.datetime import to_calendar_date
from ..utils.task_id import build_milestone_synthetic_id, build_task_id
from .type_resolver import resolve_task_type

logger = logging.getLogger(__name__)

# Project field that mirrors the issue title; never stored as a custom field
TITLE_FIELD = "Title"


def map_remote_item_to_task(item: RawProjectItem, config: GanttConfig) -> Task | None:
    """Build a task from a fetched project item.

    Returns None for items without issue content (draft issues, pull requests).
    Date fields named in the field mapping become ``start_date`` / ``end_date``;
    every other field value is kept in ``custom_fields``.
    """
    issue = item.content
    if issue is None:
        return None

    mapping = config.sync.field_mapping
    date_fields = {mapping.start_date, mapping.end_date}
    custom_fields = {
        name: value
        for name, value in item.field_values.items()
        if name not in date_fields and name != TITLE_FIELD
    }

    return Task(
        id=build_task_id(issue.repository, issue.number),
        type=resolve_task_type(issue.labels, custom_fields, config.task_types, mapping.type),
        github_issue=issue.number,
        github_repo=issue.repository,
        title=issue.title,
        body=issue.body,
        state=STATE_CLOSED if issue.state == STATE_CLOSED else STATE_OPEN,
        state_reason=issue.state_reason,
        assignees=list(issue.assignees),
        labels=list(issue.labels),
        milestone=issue.milestone,
        created_at=issue.created_at,
        updated_at=issue.updated_at,
        closed_at=issue.closed_at,
        custom_fields=custom_fields,
        start_date=to_calendar_date(item.field_values.get(mapping.start_date)),
        end_date=to_calendar_date(item.field_values.get(mapping.end_date)),
    )


def milestone_to_task(milestone: RawMilestone, repo: str) -> Task:
    """Mirror a repository milestone as a read-only synthetic task."""
    return Task(
        id=build_milestone_synthetic_id(repo, milestone.number),
        type=MILESTONE_TASK_TYPE,
        github_repo=repo,
        title=milestone.title,
        body=milestone.description,
        state=STATE_CLOSED if milestone.state.lower() == STATE_CLOSED else STATE_OPEN,
        created_at=milestone.created_at,
        updated_at=milestone.updated_at,
        closed_at=milestone.closed_at,
        date=to_calendar_date(milestone.due_on),
    )


def _keep_local_edges(local_deps: list[Dependency], remote_deps: list[Dependency]) -> list[Dependency]:
    by_task = {dep.task: dep for dep in local_deps}
    return [by_task[dep.task].model_copy() if dep.task in by_task else dep for dep in remote_deps]


def merge_remote_into_local(
    local: Task, remote: Task, *, type_field_configured: bool = False
) -> Task:
    """Fold a remote task into its local counterpart.

    Remote wins for content and hierarchy. For ``blocked_by`` the set of edges
    follows remote, but an edge present on both sides keeps the local
    ``type`` and ``lag``. The task type stays local unless a project type
    field is configured. Neither input is modified.
    """
    merged = remote.model_copy(deep=True)
    merged.blocked_by = _keep_local_edges(local.blocked_by, merged.blocked_by)
    if not type_field_configured:
        merged.type = local.type
    return merged


def merge_remote_sync_fields(
    base: SyncFields, remote: SyncFields, *, type_field_configured: bool = False
) -> SyncFields:
    """``merge_remote_into_local`` applied to cached sync fields."""
    merged = remote.model_copy(deep=True)
    merged.blocked_by = _keep_local_edges(base.blocked_by, merged.blocked_by)
    if not type_field_configured:
        merged.type = base.type
    return merged


def apply_sub_issue_links(tasks: list[Task], links: list[SubIssueLink]) -> None:
    """Set ``parent`` / ``sub_tasks`` from fetched sub-issue edges.

    Edges touching a task outside ``tasks`` are ignored.
    """
    by_id = {task.id: task for task in tasks}
    for link in links:
        parent_id = build_task_id(link.parent_repo, link.parent_number)
        child_id = build_task_id(link.child_repo, link.child_number)
        parent = by_id.get(parent_id)
        child = by_id.get(child_id)
        if parent is None or child is None:
            logger.debug("Skipping sub-issue link %s -> %s outside the project", parent_id, child_id)
            continue
        if child_id not in parent.sub_tasks:
            parent.sub_tasks.append(child_id)
        child.parent = parent_id


def apply_blocked_by_links(tasks: list[Task], links: list[BlockedByLink]) -> None:
    """Add ``blocked_by`` entries from fetched blocking edges.

    New edges get the default finish-to-start type with no lag.
    """
    by_id = {task.id: task for task in tasks}
    for link in links:
        blocked_id = build_task_id(link.blocked_repo, link.blocked_number)
        blocking_id = build_task_id(link.blocking_repo, link.blocking_number)
        blocked = by_id.get(blocked_id)
        if blocked is None or blocking_id not in by_id:
            logger.debug("Skipping blocked-by link %s -> %s outside the project", blocked_id, blocking_id)
            continue
        if any(dep.task == blocking_id for dep in blocked.blocked_by):
            continue
        blocked.blocked_by.append(Dependency(task=blocking_id))
