"""Graph-wide rewriting of task references."""

from ..models import Task


def replace_task_id_references(tasks: list[Task], old_id: str, new_id: str) -> None:
    """Point every ``parent``, ``sub_tasks`` and ``blocked_by`` reference to
    ``old_id`` at ``new_id`` instead, in place.

    Only exact matches are rewritten, so repeated or interleaved calls for
    other identities leave unrelated references alone.
    """
    if old_id == new_id:
        return
    for task in tasks:
        if task.parent == old_id:
            task.parent = new_id
        if old_id in task.sub_tasks:
            task.sub_tasks = [new_id if ref == old_id else ref for ref in task.sub_tasks]
        for dep in task.blocked_by:
            if dep.task == old_id:
                dep.task = new_id
