"""Issue comment fetching with resumable progress."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..models import Comment, CommentsFile
from ..utils.datetime import now_iso
from .client import GitHubClient, GitHubClientError, GitHubRateLimitError
from .queries import GET_ISSUE_COMMENTS

logger = logging.getLogger(__name__)

# Pause between successive issue fetches to smooth the request rate
DELAY_SECONDS = 0.1


@dataclass
class CommentTarget:
    """An issue whose comments should be cached under ``task_id``."""

    task_id: str
    owner: str
    repo: str
    issue_number: int


def fetch_issue_comments(client: GitHubClient, owner: str, repo: str, number: int) -> list[Comment]:
    """Fetch every comment of one issue, following pagination."""
    comments: list[Comment] = []
    cursor: str | None = None

    while True:
        data = client.query(
            GET_ISSUE_COMMENTS,
            {"owner": owner, "name": repo, "number": number, "cursor": cursor},
        )
        connection = data["repository"]["issue"]["comments"]
        for node in connection["nodes"]:
            comments.append(
                Comment(
                    id=node["id"],
                    author=(node.get("author") or {}).get("login") or "ghost",
                    body=node.get("body") or "",
                    created_at=node["createdAt"],
                    updated_at=node["updatedAt"],
                )
            )
        if not connection["pageInfo"]["hasNextPage"]:
            break
        cursor = connection["pageInfo"]["endCursor"]

    return comments


def fetch_all_comments(
    client: GitHubClient,
    targets: list[CommentTarget],
    existing: CommentsFile,
    save_progress: Callable[[CommentsFile], None],
    *,
    force: bool = False,
    delay: float = DELAY_SECONDS,
) -> CommentsFile:
    """Fetch comments for many issues, saving after each one.

    Issues already present in ``existing.fetched_at`` are skipped unless
    ``force`` is set, so an interrupted run picks up where it stopped. A rate
    limit ends the run after saving; any other failure skips that issue.
    """
    data = CommentsFile(
        fetched_at=dict(existing.fetched_at),
        comments=dict(existing.comments),
    )
    fetched = 0
    skipped = 0

    for target in targets:
        if not force and target.task_id in data.fetched_at:
            skipped += 1
            continue

        if fetched > 0 and delay > 0:
            time.sleep(delay)

        try:
            comments = fetch_issue_comments(client, target.owner, target.repo, target.issue_number)
        except GitHubRateLimitError:
            logger.warning("Rate limited after fetching %d issue(s). Re-run to continue.", fetched)
            save_progress(data)
            break
        except GitHubClientError as e:
            logger.warning("Failed to fetch comments for %s: %s", target.task_id, e)
            continue

        data.comments[target.task_id] = comments
        data.fetched_at[target.task_id] = now_iso()
        fetched += 1
        save_progress(data)

    logger.info("Comments: %d fetched, %d cached", fetched, skipped)
    return data
