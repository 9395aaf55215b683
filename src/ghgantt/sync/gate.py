"""Confirmation gate for pulls that would overwrite conflicting local edits."""

from __future__ import annotations

import logging
from typing import Protocol

from ..models import Conflict, GateDecision

logger = logging.getLogger(__name__)


class ConfirmationGate(Protocol):
    """Asks the operator a yes/no question.

    ``is_interactive`` is False when nobody can answer (no TTY, CI), in which
    case ``ask`` is never called.
    """

    is_interactive: bool

    def ask(self, question: str) -> str:
        """Return the raw answer to ``question``."""
        ...


def confirm_conflicts(
    conflicts: list[Conflict],
    gate: ConfirmationGate,
    *,
    force: bool = False,
    dry_run: bool = False,
) -> GateDecision:
    """Decide whether a pull may overwrite the conflicting tasks."""
    if not conflicts:
        return GateDecision.PROCEED

    logger.warning("%d task(s) have conflicting changes:", len(conflicts))
    for conflict in conflicts:
        logger.warning("  %s: %s", conflict.task_id, conflict.title)

    if force or dry_run:
        return GateDecision.PROCEED

    if not gate.is_interactive:
        logger.error("Conflicts found in a non-interactive session. Re-run with --force to accept remote changes.")
        return GateDecision.ABORT

    answer = gate.ask("Overwrite local changes with remote values? [y/N] ")
    if answer.strip().lower() in ("y", "yes"):
        return GateDecision.PROCEED
    return GateDecision.ABORT
