"""Sync engine wiring the local stores to the push and pull pipelines.

The engine owns reading and writing ``.gantt/``: it loads the task list and
sync state, hands them to ``PushExecutor`` / ``PullOrchestrator`` and
persists what comes back. Nothing is written on dry runs or aborted pulls.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ..github.comments import CommentTarget, fetch_all_comments
from ..models import PullResult, PushResult, SyncState, Task, TaskDiff, TasksFile
from ..repositories import CommentsRepository, SyncStateRepository, TasksRepository
from .diff import compute_local_diff, estimate_api_calls
from .gate import ConfirmationGate
from .pull import PullOrchestrator
from .push_executor import PushExecutor

if TYPE_CHECKING:
    from ..github.client import GitHubClient
    from ..services.config_service import ConfigService

logger = logging.getLogger(__name__)


class GanttSyncEngine:
    """Bidirectional sync between .gantt/ and a GitHub project."""

    def __init__(
        self,
        config_service: ConfigService,
        github_client: GitHubClient,
        project_root: Path,
    ) -> None:
        """Initialize the sync engine.

        Args:
            config_service: Configuration service for .gantt/config.yml
            github_client: Authenticated GitHub client
            project_root: Directory containing .gantt/
        """
        self._config_service = config_service
        self._client = github_client
        self._tasks_repo = TasksRepository(project_root)
        self._state_repo = SyncStateRepository(project_root)
        self._comments_repo = CommentsRepository(project_root)

    # --- Local inspection ---

    def local_changes(self) -> tuple[list[TaskDiff], int]:
        """Local changes since the last sync and the estimated API calls to push them."""
        tasks = self._tasks_repo.read().tasks
        diffs = compute_local_diff(tasks, self._state_repo.read())
        return diffs, estimate_api_calls(diffs)

    # --- Push ---

    def push(self, dry_run: bool = False) -> PushResult:
        """Push local changes to GitHub.

        Progress is persisted after every created issue or milestone, so an
        interrupted push never creates the same draft twice.
        """
        config = self._config_service.get_config()
        tasks_file = self._tasks_repo.read()
        sync_state = self._state_repo.read()

        if dry_run:
            diffs = compute_local_diff(tasks_file.tasks, sync_state)
            logger.info("Dry run: %d change(s) would be pushed", len(diffs))
            return PushResult(dry_run=True)

        executor = PushExecutor(self._client, config, on_progress=self._save)
        result, tasks, new_state = executor.execute(tasks_file.tasks, sync_state)
        if result.has_changes:
            self._save(tasks, new_state)
        return result

    # --- Pull ---

    def pull(
        self,
        gate: ConfirmationGate,
        *,
        force: bool = False,
        dry_run: bool = False,
        with_comments: bool = False,
    ) -> PullResult:
        """Pull the GitHub project into the local task list."""
        config = self._config_service.get_config()
        tasks_file = self._tasks_repo.read()
        sync_state = self._state_repo.read()

        orchestrator = PullOrchestrator(self._client, config)
        result, tasks, new_state = orchestrator.pull(
            tasks_file.tasks,
            sync_state,
            gate,
            force=force,
            dry_run=dry_run,
            with_comments=with_comments,
        )

        if dry_run or result.aborted:
            return result

        if not result.up_to_date:
            self._save(tasks, new_state)

        if with_comments:
            self._fetch_comments(tasks, force=force)
        return result

    def _fetch_comments(self, tasks: list[Task], force: bool) -> None:
        targets = []
        for task in tasks:
            if task.github_issue is None or "/" not in task.github_repo:
                continue
            owner, repo = task.github_repo.split("/", 1)
            targets.append(CommentTarget(task.id, owner, repo, task.github_issue))

        fetch_all_comments(
            self._client,
            targets,
            self._comments_repo.read(),
            self._comments_repo.write,
            force=force,
        )

    def _save(self, tasks: list[Task], sync_state: SyncState) -> None:
        self._tasks_repo.write(TasksFile(tasks=tasks))
        self._state_repo.write(sync_state)
