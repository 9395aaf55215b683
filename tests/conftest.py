"""Shared fixtures: a task factory and a scripted GitHub client."""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

import pytest

from ghgantt.models import GanttConfig, IdMapping, Snapshot, SyncState, Task
from ghgantt.sync.hash import extract_sync_fields, hash_sync_fields

REPO = "acme/roadmap"


def make_task(number: int | str = 1, **kwargs: Any) -> Task:
    """Build a task; ``number`` may be an issue number or a full ID."""
    task_id = number if isinstance(number, str) else f"{REPO}#{number}"
    defaults: dict[str, Any] = {"id": task_id, "title": f"Task {number}", "github_repo": REPO}
    if isinstance(number, int):
        defaults["github_issue"] = number
    defaults.update(kwargs)
    return Task(**defaults)


def snapshot_of(task: Task, **kwargs: Any) -> Snapshot:
    """Snapshot recording ``task`` as the last synced state."""
    fields = extract_sync_fields(task)
    return Snapshot(
        hash=hash_sync_fields(fields),
        synced_at="2026-01-01T00:00:00Z",
        sync_fields=fields,
        **kwargs,
    )


def synced_state(*tasks: Task, **kwargs: Any) -> SyncState:
    """Sync state in which every task is synced and mapped to GitHub IDs."""
    state = SyncState(project_node_id="PVT_1", **kwargs)
    for task in tasks:
        state.snapshots[task.id] = snapshot_of(task)
        if task.github_issue is not None:
            state.id_map[task.id] = IdMapping(
                issue_number=task.github_issue,
                issue_node_id=f"I_{task.github_issue}",
                project_item_id=f"PVTI_{task.github_issue}",
            )
    return state


PROJECT_FIELDS = [
    {"id": "F_title", "name": "Title"},
    {"id": "F_start", "name": "Start Date"},
    {"id": "F_end", "name": "End Date"},
    {
        "id": "F_status",
        "name": "Status",
        "options": [{"id": "O_todo", "name": "Todo"}, {"id": "O_done", "name": "Done"}],
    },
]


def issue_item(
    number: int,
    title: str | None = None,
    updated_at: str = "2026-01-02T00:00:00Z",
    state: str = "OPEN",
    fields: dict[str, tuple[str, Any]] | None = None,
    **content: Any,
) -> dict[str, Any]:
    """A project item node as returned by the project items query.

    ``fields`` maps a field name to ``(value_key, value)``, e.g.
    ``{"Start Date": ("date", "2026-03-01")}``.
    """
    node = {
        "id": f"I_{number}",
        "number": number,
        "title": title or f"Issue {number}",
        "body": None,
        "state": state,
        "stateReason": None,
        "assignees": {"nodes": []},
        "labels": {"nodes": []},
        "milestone": None,
        "createdAt": "2026-01-01T00:00:00Z",
        "updatedAt": updated_at,
        "closedAt": None,
        "repository": {"nameWithOwner": REPO},
    }
    node.update(content)
    values = [{"field": {"name": "Title"}, "text": node["title"]}]
    for name, (key, value) in (fields or {}).items():
        values.append({"field": {"name": name}, key: value})
    return {"id": f"PVTI_{number}", "fieldValues": {"nodes": values}, "content": node}


def project_response(*items: dict[str, Any]) -> dict[str, Any]:
    """A single-page user project response containing ``items``."""
    return {
        "user": {
            "projectV2": {
                "id": "PVT_1",
                "title": "Roadmap",
                "fields": {"nodes": PROJECT_FIELDS},
                "items": {
                    "pageInfo": {"hasNextPage": False, "endCursor": None},
                    "nodes": list(items),
                },
            }
        }
    }


def milestones_response(*nodes: dict[str, Any]) -> dict[str, Any]:
    return {
        "repository": {
            "milestones": {
                "pageInfo": {"hasNextPage": False, "endCursor": None},
                "nodes": list(nodes),
            }
        }
    }


class ScriptedGate:
    """Confirmation gate answering with a fixed reply."""

    def __init__(self, answer: str = "", is_interactive: bool = True) -> None:
        self.answer = answer
        self.is_interactive = is_interactive
        self.questions: list[str] = []

    def ask(self, question: str) -> str:
        self.questions.append(question)
        return self.answer


class FakeGitHubClient:
    """Stands in for GitHubClient, answering by GraphQL operation name.

    ``responses`` maps an operation name to either a response dict or a
    callable receiving the variables. ``failures`` maps an operation name to
    an exception to raise. Every call is recorded in ``calls``.
    """

    def __init__(
        self,
        responses: dict[str, dict[str, Any] | Callable[[dict[str, Any]], dict[str, Any]]] | None = None,
        failures: dict[str, Exception] | None = None,
    ) -> None:
        self.responses = dict(responses or {})
        self.failures = dict(failures or {})
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.next_issue_number = 100
        self.next_milestone_number = 10

    def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        match = re.search(r"(?:query|mutation)\s+(\w+)", query)
        op_name = match.group(1) if match else "anonymous"
        variables = variables or {}
        self.calls.append((op_name, variables))

        if op_name in self.failures:
            raise self.failures[op_name]
        if op_name in self.responses:
            response = self.responses[op_name]
            return response(variables) if callable(response) else response
        return self._default_response(op_name, variables)

    query = execute
    mutate = execute

    def create_milestone(
        self,
        owner: str,
        repo: str,
        title: str,
        description: str | None = None,
        due_on: str | None = None,
    ) -> dict[str, Any]:
        variables = {"owner": owner, "repo": repo, "title": title, "description": description, "due_on": due_on}
        self.calls.append(("createMilestone", variables))
        if "createMilestone" in self.failures:
            raise self.failures["createMilestone"]
        self.next_milestone_number += 1
        number = self.next_milestone_number
        return {"number": number, "node_id": f"MI_{number}", "title": title}

    def ops(self) -> list[str]:
        """Operation names in call order."""
        return [name for name, _ in self.calls]

    def calls_for(self, op_name: str) -> list[dict[str, Any]]:
        """Variables of every call to one operation."""
        return [variables for name, variables in self.calls if name == op_name]

    def _default_response(self, op_name: str, variables: dict[str, Any]) -> dict[str, Any]:
        if op_name == "CreateIssue":
            self.next_issue_number += 1
            number = self.next_issue_number
            return {"createIssue": {"issue": {"id": f"I_{number}", "number": number}}}
        if op_name == "AddItemToProject":
            return {"addProjectV2ItemById": {"item": {"id": f"PVTI_{variables['contentId']}"}}}
        if op_name == "LookupIdentities":
            data: dict[str, Any] = {
                "repository": {
                    "id": "R_1",
                    "labels": {"nodes": [{"id": "LA_bug", "name": "bug"}]},
                    "milestones": {"nodes": []},
                }
            }
            for key, login in variables.items():
                if re.fullmatch(r"u\d+", key):
                    data[key] = {"id": f"U_{login}", "login": login}
            return data
        if op_name == "GetRepositoryMilestones":
            return milestones_response()
        return {}


@pytest.fixture
def fake_client() -> FakeGitHubClient:
    return FakeGitHubClient()


@pytest.fixture
def config() -> GanttConfig:
    """Default configuration for acme/roadmap, project 1."""
    return GanttConfig.default("acme", "roadmap", 1)
