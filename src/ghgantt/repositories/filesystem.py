"""JSON document stores under the .gantt/ directory."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from ..models import CommentsFile, SyncState, TasksFile

logger = logging.getLogger(__name__)

GANTT_DIR = ".gantt"
TASKS_FILE = "tasks.json"
SYNC_STATE_FILE = "sync-state.json"
COMMENTS_FILE = "comments.json"

ModelT = TypeVar("ModelT", bound=BaseModel)


class StoreError(Exception):
    """A local store could not be read or written."""

    pass


class StoreNotFoundError(StoreError):
    """A local store file does not exist."""

    pass


class JsonStore(Generic[ModelT]):
    """A pydantic document persisted as one JSON file.

    Writes go to a temporary file in the same directory which then replaces
    the target, so readers never see a partial document.
    """

    model: type[ModelT]
    filename: str

    def __init__(self, project_root: Path) -> None:
        self.path = project_root / GANTT_DIR / self.filename

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> ModelT:
        if not self.path.exists():
            raise StoreNotFoundError(
                f"{self.path} not found. Run 'ghgantt init' to set up this project."
            )
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return self.model.model_validate(raw)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error("Invalid %s: %s", self.path, e)
            raise StoreError(f"Invalid {self.path}: {e}") from e

    def write(self, value: ModelT) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(
            value.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False
        )

        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload + "\n")
            os.replace(tmp_path, self.path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)
            raise
        logger.debug("Wrote %s", self.path)


class TasksRepository(JsonStore[TasksFile]):
    """The local task list (.gantt/tasks.json)."""

    model = TasksFile
    filename = TASKS_FILE


class SyncStateRepository(JsonStore[SyncState]):
    """Sync bookkeeping (.gantt/sync-state.json)."""

    model = SyncState
    filename = SYNC_STATE_FILE


class CommentsRepository(JsonStore[CommentsFile]):
    """Issue comment cache (.gantt/comments.json).

    A missing cache is simply empty.
    """

    model = CommentsFile
    filename = COMMENTS_FILE

    def read(self) -> CommentsFile:
        if not self.path.exists():
            return CommentsFile()
        return super().read()
