"""Status command showing unpushed local changes."""

from pathlib import Path

from ..repositories import StoreError, SyncStateRepository, TasksRepository
from ..sync.diff import compute_local_diff, estimate_api_calls
from .output import diff_line, error, header, info, success


def run_status(project_root: Path) -> int:
    """Print local changes since the last sync.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    try:
        tasks = TasksRepository(project_root).read().tasks
        sync_state = SyncStateRepository(project_root).read()
    except StoreError as e:
        error(str(e))
        return 1

    if sync_state.last_synced_at:
        info(f"Last synced: {sync_state.last_synced_at}")

    diffs = compute_local_diff(tasks, sync_state)
    if not diffs:
        success(f"No local changes ({len(tasks)} task(s))")
        return 0

    header(f"{len(diffs)} local change(s):")
    for diff in diffs:
        diff_line(diff)
    print()
    info(f"Estimated API calls to push: ~{estimate_api_calls(diffs)}")
    return 0
