"""Terminal output for the ghgantt commands.

Color is only emitted when stdout is a terminal, so piped output and test
captures stay plain.
"""

import sys

from ..models import DiffType, TaskDiff

GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
RED = "\033[31m"
RESET = "\033[0m"

# Leading symbol and its color for each message kind
_MARKS = {
    "success": ("✓", GREEN),
    "info": ("•", YELLOW),
    "error": ("✗", RED),
}

DIFF_MARKERS = {
    DiffType.ADDED: ("+", GREEN),
    DiffType.MODIFIED: ("~", YELLOW),
    DiffType.DELETED: ("-", RED),
}


def _paint(text: str, color: str) -> str:
    stream = sys.stdout
    if getattr(stream, "isatty", None) and stream.isatty():
        return f"{color}{text}{RESET}"
    return text


def _marked(kind: str, message: str) -> None:
    symbol, color = _MARKS[kind]
    print(f"{_paint(symbol, color)} {message}")


def success(message: str) -> None:
    _marked("success", message)


def info(message: str) -> None:
    _marked("info", message)


def error(message: str) -> None:
    _marked("error", message)


def header(message: str) -> None:
    """Section heading, e.g. the list of changes about to be pushed."""
    print(_paint(message, BLUE))


def diff_line(diff: TaskDiff, show_fields: bool = True) -> None:
    """Print one change as ``+ id: title`` (or ``~``/``-``)."""
    marker, color = DIFF_MARKERS[diff.type]
    line = f"  {_paint(marker, color)} {diff.id}"
    if diff.task.title:
        line += f": {diff.task.title}"
    if show_fields and diff.changed_fields:
        line += f" ({', '.join(diff.changed_fields)})"
    print(line)


def prompt(question: str) -> str:
    """Read one answer from stdin; Ctrl-C or end of input answer empty."""
    try:
        return input(question)
    except (KeyboardInterrupt, EOFError):
        print()
        return ""


def confirm(question: str) -> bool:
    """Ask a yes/no question defaulting to no."""
    return prompt(f"{question} [y/N] ").strip().lower() in ("y", "yes")
