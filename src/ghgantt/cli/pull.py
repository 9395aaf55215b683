"""Pull command for fetching the GitHub project into .gantt/."""

import logging
import sys
from pathlib import Path

from ..github.client import GitHubAuthError, GitHubClient, GitHubClientError
from ..models import Conflict, PullResult
from ..repositories import StoreError
from ..services.config_service import ConfigError, ConfigService
from ..sync.engine import GanttSyncEngine
from .output import diff_line, error, header, info, prompt, success

logger = logging.getLogger(__name__)


class TerminalGate:
    """Confirmation gate reading answers from stdin."""

    def __init__(self) -> None:
        self.is_interactive = sys.stdin.isatty()

    def ask(self, question: str) -> str:
        return prompt(question)


def run_pull(
    project_root: Path,
    dry_run: bool = False,
    force: bool = False,
    comments: bool = False,
) -> int:
    """Pull remote changes into the local task list.

    Args:
        project_root: Directory containing .gantt/
        dry_run: Show changes without writing anything
        force: Accept remote values for conflicting tasks without asking
        comments: Also fetch issue comments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    try:
        config_service = ConfigService(project_root)
        config = config_service.get_config()
    except ConfigError as e:
        error(str(e))
        return 1

    try:
        client = GitHubClient.from_environment(config.project.github.base_url)
    except GitHubAuthError as e:
        error(str(e))
        return 1

    engine = GanttSyncEngine(config_service, client, project_root)

    header(f"{'[DRY RUN] ' if dry_run else ''}Pulling {config.project.github.repo_full_name}...")
    try:
        with client:
            result = engine.pull(TerminalGate(), force=force, dry_run=dry_run, with_comments=comments)
    except StoreError as e:
        error(str(e))
        return 1
    except GitHubClientError as e:
        logger.error("Pull failed: %s", e)
        error(f"GitHub error: {e}")
        return 1

    return report_pull(result)


def report_pull(result: PullResult) -> int:
    """Print the outcome of a pull and return its exit code."""
    if result.conflicts:
        _display_conflicts(result.conflicts)

    if result.aborted:
        error("Pull aborted, local tasks unchanged")
        info("Use --force to accept remote values")
        return 1

    if result.up_to_date:
        success("Already up to date")
        return 0

    for change in result.changes:
        diff_line(change, show_fields=False)

    print()
    summary = f"+{result.added} ~{result.updated} -{result.removed}"
    if result.dry_run:
        info(f"Would apply: {summary}")
        info("Dry run, no changes applied")
    else:
        success(f"Pulled: {summary}")
    return 0


def _display_conflicts(conflicts: list[Conflict]) -> None:
    print()
    print(f"{len(conflicts)} task(s) have conflicting changes:")
    for c in conflicts:
        print(f"  - {c.task_id}: {c.title}")
        for detail in c.field_details:
            print(
                f"      {detail.field}: local={detail.local!r} "
                f"remote={detail.remote!r} last synced={detail.snapshot!r}"
            )
    print()
