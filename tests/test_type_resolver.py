"""Tests for task type resolution."""

import pytest

from ghgantt.models import TaskTypeConfig
from ghgantt.sync.type_resolver import resolve_task_type, resolve_type_option_id


@pytest.fixture
def task_types():
    return {
        "task": TaskTypeConfig(label="Task"),
        "bug": TaskTypeConfig(label="Bug", github_label="bug", github_field_value="Bug"),
        "epic": TaskTypeConfig(label="Epic", github_label="epic", github_field_value="Epic"),
    }


class TestResolveTaskType:
    """Tests for resolve_task_type."""

    def test_default_without_matches(self, task_types):
        assert resolve_task_type(["docs"], {}, task_types) == "task"

    def test_label_match(self, task_types):
        assert resolve_task_type(["docs", "epic"], {}, task_types) == "epic"

    def test_field_value_wins_over_label(self, task_types):
        assert resolve_task_type(["bug"], {"Kind": "Epic"}, task_types, "Kind") == "epic"

    def test_field_ignored_when_not_configured(self, task_types):
        assert resolve_task_type([], {"Kind": "Epic"}, task_types) == "task"

    def test_unknown_field_value_falls_back_to_labels(self, task_types):
        assert resolve_task_type(["bug"], {"Kind": "Spike"}, task_types, "Kind") == "bug"


class TestResolveTypeOptionId:
    """Tests for resolve_type_option_id."""

    def test_mapped_option(self, task_types):
        option_ids = {"Kind": {"Bug": "O_bug", "Epic": "O_epic"}}
        assert resolve_type_option_id("epic", task_types, "Kind", option_ids) == "O_epic"

    def test_type_without_field_value(self, task_types):
        assert resolve_type_option_id("task", task_types, "Kind", {"Kind": {}}) is None

    def test_unknown_type(self, task_types):
        assert resolve_type_option_id("spike", task_types, "Kind", {}) is None

    def test_missing_option(self, task_types):
        assert resolve_type_option_id("bug", task_types, "Kind", {"Kind": {"Epic": "O"}}) is None
