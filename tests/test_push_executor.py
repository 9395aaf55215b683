"""Tests for PushExecutor."""

import datetime as dt

import pytest
from conftest import FakeGitHubClient, make_task, synced_state

from ghgantt.github.client import GitHubClientError, GitHubNotFoundError
from ghgantt.models import Dependency, FieldMapping, GanttConfig, SyncState, TaskTypeConfig
from ghgantt.sync.hash import hash_task
from ghgantt.sync.push_executor import PushExecutor


def _ids(tasks):
    return [task.id for task in tasks]


@pytest.fixture
def auto_config(config):
    config.sync.auto_create_issues = True
    return config


class TestNothingToPush:
    def test_no_calls_when_everything_is_synced(self, fake_client, config):
        tasks = [make_task(1), make_task(2)]
        result, new_tasks, state = PushExecutor(fake_client, config).execute(tasks, synced_state(*tasks))

        assert fake_client.calls == []
        assert not result.has_changes
        assert new_tasks == tasks

    def test_synthetic_milestones_are_read_only(self, fake_client, config):
        """Edits to mirrored milestones are never pushed."""
        milestone = make_task("milestone:acme/roadmap#4", type="milestone", title="v1")
        state = synced_state(milestone)
        edited = milestone.model_copy(update={"title": "v1.1"})

        result, _, _ = PushExecutor(fake_client, config).execute([edited], state)

        assert fake_client.calls == []
        assert result.skipped == 0

    def test_inputs_are_not_modified(self, fake_client, auto_config):
        draft = make_task("acme/roadmap#draft-1")
        state = synced_state()

        PushExecutor(fake_client, auto_config).execute([draft], state)

        assert draft.id == "acme/roadmap#draft-1"
        assert state.id_map == {}
        assert state.snapshots == {}


class TestPromoteMilestones:
    def test_creates_milestone_and_rewrites_references(self, fake_client, config):
        draft = make_task(
            "acme/roadmap#draft-1", type="milestone", title="Beta", body="Beta release",
            date=dt.date(2026, 3, 1),
        )
        existing = make_task(2)
        state = synced_state(existing)
        edited = existing.model_copy(update={"blocked_by": [Dependency(task=draft.id)]})

        result, tasks, new_state = PushExecutor(fake_client, config).execute([draft, edited], state)

        assert fake_client.calls_for("createMilestone") == [
            {
                "owner": "acme",
                "repo": "roadmap",
                "title": "Beta",
                "description": "Beta release",
                "due_on": "2026-03-01",
            }
        ]
        assert _ids(tasks) == ["milestone:acme/roadmap#11", "acme/roadmap#2"]
        assert tasks[1].blocked_by[0].task == "milestone:acme/roadmap#11"
        assert result.created == 1
        assert result.updated == 1
        assert "acme/roadmap#draft-1" not in new_state.snapshots
        assert "milestone:acme/roadmap#11" in new_state.snapshots

    def test_end_date_used_when_no_date(self, fake_client, config):
        draft = make_task("acme/roadmap#draft-1", type="milestone", end_date=dt.date(2026, 4, 30))
        PushExecutor(fake_client, config).execute([draft], SyncState())
        assert fake_client.calls_for("createMilestone")[0]["due_on"] == "2026-04-30"

    def test_no_due_date(self, fake_client, config):
        draft = make_task("acme/roadmap#draft-1", type="milestone")
        PushExecutor(fake_client, config).execute([draft], SyncState())
        assert fake_client.calls_for("createMilestone")[0]["due_on"] is None

    def test_milestones_created_without_auto_create(self, fake_client, config):
        """Milestone drafts do not depend on sync.auto_create_issues."""
        assert config.sync.auto_create_issues is False
        draft = make_task("acme/roadmap#draft-1", type="milestone")
        result, _, _ = PushExecutor(fake_client, config).execute([draft], SyncState())
        assert result.created == 1


class TestPromoteDrafts:
    @pytest.fixture
    def state(self):
        existing = make_task(1)
        return synced_state(
            existing,
            field_ids={"Start Date": "F_start", "End Date": "F_end", "Status": "F_status"},
            option_ids={"Status": {"Todo": "O_todo", "Done": "O_done"}},
        )

    @pytest.fixture
    def drafts(self):
        return [
            make_task(
                "acme/roadmap#draft-1",
                title="Parent",
                assignees=["alice"],
                labels=["bug", "missing"],
                start_date=dt.date(2026, 3, 1),
                custom_fields={"Status": "Todo"},
            ),
            make_task(
                "acme/roadmap#draft-2",
                title="Child",
                state="closed",
                parent="acme/roadmap#draft-1",
                blocked_by=[Dependency(task="acme/roadmap#draft-1", lag=2)],
            ),
        ]

    def test_drafts_skipped_without_auto_create(self, fake_client, config, state, drafts):
        result, tasks, new_state = PushExecutor(fake_client, config).execute(
            [make_task(1), *drafts], state
        )

        assert fake_client.calls == []
        assert result.skipped == 2
        assert result.created == 0
        assert _ids(tasks) == ["acme/roadmap#1", "acme/roadmap#draft-1", "acme/roadmap#draft-2"]

    def test_creates_issues_with_new_identities(self, fake_client, auto_config, state, drafts):
        result, tasks, new_state = PushExecutor(fake_client, auto_config).execute(
            [make_task(1), *drafts], state
        )

        assert result.created == 2
        assert _ids(tasks) == ["acme/roadmap#1", "acme/roadmap#101", "acme/roadmap#102"]
        assert tasks[1].github_issue == 101
        assert tasks[2].github_repo == "acme/roadmap"
        assert new_state.id_map["acme/roadmap#101"].issue_node_id == "I_101"
        assert new_state.id_map["acme/roadmap#102"].project_item_id == "PVTI_I_102"

    def test_references_point_to_new_identities(self, fake_client, auto_config, state, drafts):
        _, tasks, _ = PushExecutor(fake_client, auto_config).execute([make_task(1), *drafts], state)

        child = tasks[2]
        assert child.parent == "acme/roadmap#101"
        assert child.blocked_by == [Dependency(task="acme/roadmap#101", lag=2)]

    def test_create_issue_payload(self, fake_client, auto_config, state, drafts):
        PushExecutor(fake_client, auto_config).execute([make_task(1), *drafts], state)

        first = fake_client.calls_for("CreateIssue")[0]
        assert first["repositoryId"] == "R_1"
        assert first["title"] == "Parent"
        assert first["labelIds"] == ["LA_bug"]
        assert first["assigneeIds"] == ["U_alice"]
        assert first["milestoneId"] is None

    def test_single_identity_lookup(self, fake_client, auto_config, state, drafts):
        PushExecutor(fake_client, auto_config).execute([make_task(1), *drafts], state)
        assert fake_client.calls_for("LookupIdentities") == [
            {"owner": "acme", "name": "roadmap", "u0": "alice"}
        ]

    def test_closed_draft_is_closed_after_creation(self, fake_client, auto_config, state, drafts):
        PushExecutor(fake_client, auto_config).execute([make_task(1), *drafts], state)
        assert fake_client.calls_for("CloseIssue") == [{"issueId": "I_102"}]

    def test_project_fields_written(self, fake_client, auto_config, state, drafts):
        PushExecutor(fake_client, auto_config).execute([make_task(1), *drafts], state)

        writes = fake_client.calls_for("UpdateItemField")
        assert {"projectId": "PVT_1", "itemId": "PVTI_I_101", "fieldId": "F_start",
                "value": {"date": "2026-03-01"}} in writes
        assert {"projectId": "PVT_1", "itemId": "PVTI_I_101", "fieldId": "F_status",
                "value": {"singleSelectOptionId": "O_todo"}} in writes
        assert all(w["fieldId"] != "F_end" for w in writes)

    def test_relationships_linked_after_all_creates(self, fake_client, auto_config, state, drafts):
        PushExecutor(fake_client, auto_config).execute([make_task(1), *drafts], state)

        ops = fake_client.ops()
        assert ops.index("AddSubIssue") > max(i for i, op in enumerate(ops) if op == "CreateIssue")
        assert fake_client.calls_for("AddSubIssue") == [{"issueId": "I_101", "subIssueId": "I_102"}]
        assert fake_client.calls_for("AddBlockedBy") == [
            {"issueId": "I_102", "blockingIssueId": "I_101"}
        ]

    def test_progress_reported_after_each_promotion(self, auto_config, state, drafts):
        seen = []
        client = FakeGitHubClient()
        executor = PushExecutor(
            client, auto_config, on_progress=lambda tasks, s: seen.append((_ids(tasks), dict(s.id_map)))
        )

        executor.execute([make_task(1), *drafts], state)

        assert len(seen) == 2
        assert seen[0][0] == ["acme/roadmap#1", "acme/roadmap#101", "acme/roadmap#draft-2"]
        assert "acme/roadmap#101" in seen[0][1]
        assert "acme/roadmap#102" not in seen[0][1]

    def test_snapshots_replace_draft_ids(self, fake_client, auto_config, state, drafts):
        _, tasks, new_state = PushExecutor(fake_client, auto_config).execute(
            [make_task(1), *drafts], state
        )

        assert set(new_state.snapshots) == {"acme/roadmap#1", "acme/roadmap#101", "acme/roadmap#102"}
        assert new_state.snapshots["acme/roadmap#102"].hash == hash_task(tasks[2])
        assert new_state.snapshots["acme/roadmap#102"].remote_hash is None
        assert new_state.last_synced_at is not None

    def test_requires_project_node_id(self, fake_client, auto_config, drafts):
        with pytest.raises(GitHubClientError, match="ghgantt pull"):
            PushExecutor(fake_client, auto_config).execute(drafts, SyncState())

    def test_create_failure_propagates(self, auto_config, state, drafts):
        client = FakeGitHubClient(failures={"CreateIssue": GitHubClientError("boom")})
        with pytest.raises(GitHubClientError, match="boom"):
            PushExecutor(client, auto_config).execute([make_task(1), *drafts], state)

    def test_relationship_failure_is_best_effort(self, auto_config, state, drafts):
        client = FakeGitHubClient(failures={"AddSubIssue": GitHubNotFoundError("no sub-issues")})

        result, tasks, _ = PushExecutor(client, auto_config).execute([make_task(1), *drafts], state)

        assert result.created == 2
        assert "AddBlockedBy" in client.ops()

    def test_type_field_option_written(self, fake_client, state):
        config = GanttConfig.default(
            "acme", "roadmap", 1, field_mapping=FieldMapping(type="Kind")
        )
        config.sync.auto_create_issues = True
        config.task_types["epic"] = TaskTypeConfig(label="Epic", github_field_value="Epic")
        state.field_ids["Kind"] = "F_kind"
        state.option_ids["Kind"] = {"Epic": "O_epic"}

        PushExecutor(fake_client, config).execute(
            [make_task(1), make_task("acme/roadmap#draft-1", type="epic")], state
        )

        assert {"projectId": "PVT_1", "itemId": "PVTI_I_101", "fieldId": "F_kind",
                "value": {"singleSelectOptionId": "O_epic"}} in fake_client.calls_for("UpdateItemField")


class TestUpdateExisting:
    def test_updates_content_and_state(self, fake_client, config):
        original = make_task(1, title="Old")
        state = synced_state(original)
        edited = original.model_copy(update={"title": "New", "state": "closed"})

        result, _, new_state = PushExecutor(fake_client, config).execute([edited], state)

        assert result.updated == 1
        assert fake_client.calls_for("UpdateIssue") == [
            {"issueId": "I_1", "title": "New", "body": None}
        ]
        assert fake_client.calls_for("CloseIssue") == [{"issueId": "I_1"}]
        assert new_state.snapshots[edited.id].hash == hash_task(edited)

    def test_reopen(self, fake_client, config):
        original = make_task(1, state="closed")
        state = synced_state(original)
        edited = original.model_copy(update={"state": "open"})

        PushExecutor(fake_client, config).execute([edited], state)

        assert fake_client.calls_for("ReopenIssue") == [{"issueId": "I_1"}]

    def test_unchanged_state_not_replayed(self, fake_client, config):
        original = make_task(1)
        state = synced_state(original)
        PushExecutor(fake_client, config).execute([original.model_copy(update={"title": "x"})], state)
        assert "CloseIssue" not in fake_client.ops()
        assert "ReopenIssue" not in fake_client.ops()

    def test_structural_deltas(self, fake_client, config):
        tasks = [
            make_task(1, parent="acme/roadmap#2", blocked_by=[Dependency(task="acme/roadmap#3")]),
            make_task(2),
            make_task(3),
            make_task(4),
        ]
        state = synced_state(*tasks)
        edited = tasks[0].model_copy(
            update={"parent": "acme/roadmap#4", "blocked_by": [Dependency(task="acme/roadmap#2")]}
        )

        PushExecutor(fake_client, config).execute([edited, *tasks[1:]], state)

        assert fake_client.calls_for("RemoveSubIssue") == [{"issueId": "I_2", "subIssueId": "I_1"}]
        assert fake_client.calls_for("AddSubIssue") == [{"issueId": "I_4", "subIssueId": "I_1"}]
        assert fake_client.calls_for("AddBlockedBy") == [{"issueId": "I_1", "blockingIssueId": "I_2"}]
        assert fake_client.calls_for("RemoveBlockedBy") == [
            {"issueId": "I_1", "blockingIssueId": "I_3"}
        ]

    def test_deleted_tasks_are_skipped(self, fake_client, config):
        state = synced_state(make_task(1), make_task(2))
        result, _, new_state = PushExecutor(fake_client, config).execute([make_task(1)], state)

        assert fake_client.calls == []
        assert result.skipped == 1
        assert "acme/roadmap#2" in new_state.snapshots

    def test_missing_id_mapping_is_skipped(self, fake_client, config):
        original = make_task(1)
        state = synced_state(original)
        state.id_map.clear()

        result, _, _ = PushExecutor(fake_client, config).execute(
            [original.model_copy(update={"title": "x"})], state
        )

        assert result.skipped == 1
        assert fake_client.calls == []

    def test_update_failure_propagates(self, config):
        client = FakeGitHubClient(failures={"UpdateIssue": GitHubClientError("denied")})
        original = make_task(1)
        with pytest.raises(GitHubClientError):
            PushExecutor(client, config).execute(
                [original.model_copy(update={"title": "x"})], synced_state(original)
            )

    def test_snapshot_keeps_remote_updated_at(self, fake_client, config):
        original = make_task(1)
        state = synced_state(original)
        state.snapshots[original.id].updated_at = "2026-01-05T00:00:00Z"

        _, _, new_state = PushExecutor(fake_client, config).execute(
            [original.model_copy(update={"title": "x"})], state
        )

        assert new_state.snapshots[original.id].updated_at == "2026-01-05T00:00:00Z"

    def test_untouched_snapshots_kept(self, fake_client, config):
        a, b = make_task(1), make_task(2)
        state = synced_state(a, b)

        _, _, new_state = PushExecutor(fake_client, config).execute(
            [a.model_copy(update={"title": "x"}), b], state
        )

        assert new_state.snapshots[b.id] == state.snapshots[b.id]
