"""Task identity helpers.

Three identity forms share one namespace:

- ``owner/repo#12``: a GitHub issue
- ``owner/repo#draft-3``: a local task that has not been pushed yet
- ``milestone:owner/repo#4``: a read-only task mirrored from a milestone
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models import Task

MILESTONE_PREFIX = "milestone:"

_DRAFT_RE = re.compile(r"#draft-(\d+)$")


def build_task_id(repo: str, issue_number: int) -> str:
    """Identity of a GitHub issue."""
    return f"{repo}#{issue_number}"


def build_milestone_synthetic_id(repo: str, milestone_number: int) -> str:
    """Identity of a task mirrored from a milestone."""
    return f"{MILESTONE_PREFIX}{repo}#{milestone_number}"


def is_draft_task(task_id: str) -> bool:
    """Whether the identity belongs to a not-yet-pushed draft."""
    return _DRAFT_RE.search(task_id) is not None


def is_milestone_synthetic_task(task_id: str) -> bool:
    """Whether the identity belongs to a synthetic milestone task."""
    return task_id.startswith(MILESTONE_PREFIX)


def is_milestone_draft_task(task: Task) -> bool:
    """Whether a draft should be created as a GitHub milestone, not an issue."""
    from ..models import MILESTONE_TASK_TYPE

    return (
        is_draft_task(task.id)
        and not is_milestone_synthetic_task(task.id)
        and task.type == MILESTONE_TASK_TYPE
    )
