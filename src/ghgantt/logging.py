"""Logging setup for the ghgantt command line."""

import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that repeat what the GitHub client already logs
_NOISY_LOGGERS = ("httpx", "httpcore")


def _attach(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)


def setup_logging(verbose: int = 0, log_file: Path | None = None, command: str | None = None) -> None:
    """Route the ``ghgantt`` logger to stderr and/or a file.

    Nothing is configured when ``verbose`` is 0 and no ``log_file`` is
    given, so normal runs only print command output.

    Args:
        verbose: 0 for quiet, 1 for INFO, 2 or more for DEBUG
        log_file: Append logs to this file (parents are created)
        command: Subcommand name recorded in the run header
    """
    if not verbose and log_file is None:
        return

    level = logging.DEBUG if verbose >= 2 else logging.INFO
    logger = logging.getLogger("ghgantt")
    logger.setLevel(level)

    if verbose:
        _attach(logger, logging.StreamHandler(sys.stderr), level)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _attach(logger, logging.FileHandler(log_file, encoding="utf-8"), level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    started = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S UTC")
    logger.info("-" * 60)
    logger.info(
        "ghgantt %s started %s (log level %s)",
        command or "run",
        started,
        logging.getLevelName(level),
    )
