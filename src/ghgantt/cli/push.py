"""Push command for sending local task changes to GitHub."""

import logging
from pathlib import Path

from ..github.client import GitHubAuthError, GitHubClient, GitHubClientError
from ..repositories import StoreError
from ..services.config_service import ConfigError, ConfigService
from ..sync.engine import GanttSyncEngine
from .output import confirm, diff_line, error, header, info, success

logger = logging.getLogger(__name__)


def run_push(project_root: Path, dry_run: bool = False, yes: bool = False) -> int:
    """Push local changes to GitHub.

    Args:
        project_root: Directory containing .gantt/
        dry_run: Show what would be pushed without calling GitHub
        yes: Push without asking for confirmation

    Returns:
        0 when the push completed, was cancelled or had nothing to do; 1 on error
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

    try:
        with client:
            diffs, estimate = engine.local_changes()
            if not diffs:
                info("Nothing to push")
                return 0

            header(f"\n{'[DRY RUN] ' if dry_run else ''}Changes to push to GitHub:")
            print(f"Target repository: {config.project.github.repo_full_name}")
            print()
            for diff in diffs:
                diff_line(diff)
            print()
            info(f"Estimated API calls: ~{estimate}")

            if dry_run:
                return 0

            if not yes and not confirm(f"Push {len(diffs)} change(s) to GitHub?"):
                info("Push cancelled")
                return 0

            header("\nPushing to GitHub...")
            result = engine.push()
    except StoreError as e:
        error(str(e))
        return 1
    except GitHubClientError as e:
        logger.error("Push stopped: %s", e)
        error(f"GitHub error: {e}")
        info("Completed work was saved; re-run push to continue")
        return 1

    print()
    success(f"Created {result.created}, updated {result.updated}, skipped {result.skipped}")
    if result.skipped and not config.sync.auto_create_issues:
        info("Draft tasks are only created when 'sync.auto_create_issues' is enabled")
    return 0
