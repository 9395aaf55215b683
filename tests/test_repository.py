"""Integration tests for the .gantt/ JSON stores."""

import datetime as dt
import json
from pathlib import Path
from unittest.mock import patch

import pytest
from conftest import make_task, synced_state

from ghgantt.models import Comment, CommentsFile, Dependency, DependencyType, TasksFile
from ghgantt.repositories import (
    CommentsRepository,
    StoreError,
    StoreNotFoundError,
    SyncStateRepository,
    TasksRepository,
)


@pytest.fixture
def tasks_repo(tmp_path: Path) -> TasksRepository:
    return TasksRepository(tmp_path)


class TestTasksRepository:
    """Tests for TasksRepository."""

    def test_missing_file_raises(self, tasks_repo: TasksRepository):
        """Reading before init points the user at 'ghgantt init'."""
        assert not tasks_repo.exists()
        with pytest.raises(StoreNotFoundError, match="ghgantt init"):
            tasks_repo.read()

    def test_write_creates_directory(self, tmp_path: Path, tasks_repo: TasksRepository):
        tasks_repo.write(TasksFile())
        assert (tmp_path / ".gantt" / "tasks.json").exists()

    def test_roundtrip_keeps_schedule(self, tasks_repo: TasksRepository):
        task = make_task(
            1,
            start_date=dt.date(2026, 3, 1),
            blocked_by=[Dependency(task="acme/roadmap#2", type=DependencyType.START_TO_START, lag=2)],
            custom_fields={"Estimate": 3, "Status": "Todo"},
        )
        tasks_repo.write(TasksFile(tasks=[task]))
        assert tasks_repo.read().tasks == [task]

    def test_dates_stored_as_iso_strings(self, tmp_path: Path, tasks_repo: TasksRepository):
        tasks_repo.write(TasksFile(tasks=[make_task(1, end_date=dt.date(2026, 5, 31))]))

        raw = json.loads((tmp_path / ".gantt" / "tasks.json").read_text())
        assert raw["tasks"][0]["end_date"] == "2026-05-31"
        assert raw["tasks"][0]["blocked_by"] == []

    def test_invalid_json_raises_store_error(self, tmp_path: Path, tasks_repo: TasksRepository):
        path = tmp_path / ".gantt" / "tasks.json"
        path.parent.mkdir()
        path.write_text("{not json")

        with pytest.raises(StoreError):
            tasks_repo.read()

    def test_invalid_document_raises_store_error(self, tmp_path: Path, tasks_repo: TasksRepository):
        path = tmp_path / ".gantt" / "tasks.json"
        path.parent.mkdir()
        path.write_text(json.dumps({"tasks": [{"title": "no id"}]}))

        with pytest.raises(StoreError):
            tasks_repo.read()

    def test_failed_write_leaves_previous_file(self, tmp_path: Path, tasks_repo: TasksRepository):
        """A crash mid-write never leaves a partial document behind."""
        tasks_repo.write(TasksFile(tasks=[make_task(1)]))

        with patch("ghgantt.repositories.filesystem.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                tasks_repo.write(TasksFile(tasks=[make_task(1), make_task(2)]))

        assert len(tasks_repo.read().tasks) == 1
        assert list((tmp_path / ".gantt").glob("*.tmp")) == []


class TestSyncStateRepository:
    """Tests for SyncStateRepository."""

    def test_roundtrip(self, tmp_path: Path):
        repo = SyncStateRepository(tmp_path)
        state = synced_state(make_task(1), make_task(2), field_ids={"Status": "F_1"})

        repo.write(state)

        assert repo.read() == state

    def test_snapshot_keys_use_camel_case(self, tmp_path: Path):
        repo = SyncStateRepository(tmp_path)
        state = synced_state(make_task(1))
        state.snapshots["acme/roadmap#1"].remote_hash = "abc"

        repo.write(state)

        raw = json.loads((tmp_path / ".gantt" / "sync-state.json").read_text())
        snapshot = raw["snapshots"]["acme/roadmap#1"]
        assert "syncFields" in snapshot
        assert snapshot["remoteHash"] == "abc"

    def test_reads_snapshot_without_cached_fields(self, tmp_path: Path):
        path = tmp_path / ".gantt" / "sync-state.json"
        path.parent.mkdir()
        path.write_text(
            json.dumps({"snapshots": {"acme/roadmap#1": {"hash": "h", "synced_at": "t"}}})
        )

        state = SyncStateRepository(tmp_path).read()

        snapshot = state.snapshots["acme/roadmap#1"]
        assert snapshot.sync_fields is None
        assert snapshot.remote_hash is None


class TestCommentsRepository:
    """Tests for CommentsRepository."""

    def test_missing_file_is_empty(self, tmp_path: Path):
        data = CommentsRepository(tmp_path).read()
        assert data == CommentsFile()

    def test_roundtrip(self, tmp_path: Path):
        repo = CommentsRepository(tmp_path)
        data = CommentsFile(
            fetched_at={"acme/roadmap#1": "2026-01-01T00:00:00Z"},
            comments={
                "acme/roadmap#1": [
                    Comment(id="C_1", author="alice", body="hi", created_at="t1", updated_at="t1")
                ]
            },
        )

        repo.write(data)

        assert repo.read() == data
