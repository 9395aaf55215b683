"""Init command for connecting a project root to a GitHub project."""

import logging
from pathlib import Path
from typing import Literal

from ..github.client import GitHubAuthError, GitHubClient, GitHubClientError
from ..github.project import fetch_project
from ..models import FieldMapping, GanttConfig, SyncState, TasksFile
from ..repositories import StoreError, SyncStateRepository, TasksRepository
from ..services.config_service import ConfigService
from ..sync.engine import GanttSyncEngine
from .output import error, header, info, success
from .pull import TerminalGate, report_pull

logger = logging.getLogger(__name__)


def run_init(
    project_root: Path,
    owner: str,
    repo: str,
    project_number: int,
    org: bool = False,
    field_mapping: FieldMapping | None = None,
    force: bool = False,
) -> int:
    """Write .gantt/ for a GitHub project and pull it.

    Args:
        project_root: Directory to create .gantt/ in
        owner: Project and repository owner
        repo: Repository new issues are created in
        project_number: Project number (from the project URL)
        org: Whether the owner is an organization
        field_mapping: Project field names for dates, status and type
        force: Overwrite an existing configuration

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    config_service = ConfigService(project_root)
    if config_service.exists() and not force:
        error(f"{config_service.config_path} already exists")
        info("Use --force to overwrite it")
        return 1

    owner_type: Literal["user", "organization"] = "organization" if org else "user"
    try:
        config = GanttConfig.default(owner, repo, project_number, owner_type, field_mapping)
    except ValueError as e:
        error(f"Invalid project settings: {e}")
        return 1

    try:
        client = GitHubClient.from_environment(config.project.github.base_url)
    except GitHubAuthError as e:
        error(str(e))
        return 1

    with client:
        header(f"Fetching project #{project_number} of {owner}...")
        try:
            project = fetch_project(client, owner, project_number, owner_type)
        except GitHubClientError as e:
            logger.error("Project lookup for %s #%d failed: %s", owner, project_number, e)
            error(f"Could not fetch project: {e}")
            return 1

        success(f"Found project '{project.title}' with {len(project.items)} item(s)")
        config.project.name = project.title

        mapping = config.sync.field_mapping
        for field_name in (mapping.start_date, mapping.end_date, mapping.status):
            if project.get_field(field_name) is None:
                info(f"Project has no field named '{field_name}'")

        status_field = project.get_field(mapping.status)
        if status_field is not None:
            config.statuses.field_name = mapping.status
            config.detect_statuses(list(status_field.options))

        config_service.save(config)
        tasks_repo = TasksRepository(project_root)
        if not tasks_repo.exists() or force:
            tasks_repo.write(TasksFile())
        SyncStateRepository(project_root).write(
            SyncState(
                project_node_id=project.node_id,
                field_ids=project.field_ids,
                option_ids=project.option_ids,
            )
        )
        success(f"Initialized {config_service.config_path.parent}")

        header("Pulling project...")
        engine = GanttSyncEngine(config_service, client, project_root)
        try:
            result = engine.pull(TerminalGate(), force=True)
        except (StoreError, GitHubClientError) as e:
            logger.error("Initial pull failed: %s", e)
            error(f"Initial pull failed: {e}")
            info("Run 'ghgantt pull' to retry")
            return 1

    return report_pull(result)
