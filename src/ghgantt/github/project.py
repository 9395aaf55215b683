"""Read-side GitHub operations: project items, milestones and relationships."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

from .client import GitHubClient, GitHubClientError, GitHubRateLimitError
from .queries import (
    GET_ISSUE_RELATIONSHIPS,
    GET_ORG_PROJECT_ITEMS,
    GET_REPOSITORY_MILESTONES,
    GET_USER_PROJECT_ITEMS,
    build_identity_lookup_query,
)

logger = logging.getLogger(__name__)


@dataclass
class RawIssue:
    """Issue content of a project item."""

    node_id: str
    number: int
    title: str
    body: str | None
    state: str  # lower-cased
    state_reason: str | None
    assignees: list[str]
    labels: list[str]
    milestone: str | None
    created_at: str | None
    updated_at: str | None
    closed_at: str | None
    repository: str  # owner/repo


@dataclass
class RawProjectItem:
    """A project item with its flattened field values (field name -> value)."""

    id: str
    field_values: dict[str, Any]
    content: RawIssue | None


@dataclass
class RawField:
    """A project field; single-select fields carry their options (name -> id)."""

    id: str
    name: str
    options: dict[str, str] = field(default_factory=dict)


@dataclass
class RawProject:
    """A fetched project: identity, fields and all issue items."""

    node_id: str
    title: str
    fields: list[RawField]
    items: list[RawProjectItem]

    @property
    def field_ids(self) -> dict[str, str]:
        return {f.name: f.id for f in self.fields}

    @property
    def option_ids(self) -> dict[str, dict[str, str]]:
        return {f.name: dict(f.options) for f in self.fields if f.options}

    def get_field(self, name: str) -> RawField | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None


@dataclass
class RawMilestone:
    """A repository milestone."""

    node_id: str
    number: int
    title: str
    description: str | None
    due_on: str | None
    state: str
    created_at: str | None = None
    updated_at: str | None = None
    closed_at: str | None = None


@dataclass
class SubIssueLink:
    """Parent/child edge between two issues."""

    parent_repo: str
    parent_number: int
    child_repo: str
    child_number: int


@dataclass
class BlockedByLink:
    """``blocked`` is blocked by ``blocking``."""

    blocked_repo: str
    blocked_number: int
    blocking_repo: str
    blocking_number: int


@dataclass
class RepositoryMetadata:
    """Node IDs needed to create issues in one repository."""

    repository_id: str
    label_ids: dict[str, str] = field(default_factory=dict)
    milestone_ids: dict[str, str] = field(default_factory=dict)  # title -> id
    user_ids: dict[str, str] = field(default_factory=dict)  # login -> id


def _field_value(node: dict[str, Any]) -> Any:
    for key in ("name", "text", "date", "number", "title"):
        if node.get(key) is not None:
            return node[key]
    return None


def _parse_item(node: dict[str, Any]) -> RawProjectItem:
    field_values: dict[str, Any] = {}
    for value_node in (node.get("fieldValues") or {}).get("nodes", []):
        field_name = (value_node.get("field") or {}).get("name")
        if field_name:
            field_values[field_name] = _field_value(value_node)

    content = node.get("content") or None
    issue = None
    # Draft issues and pull requests come back without an issue number
    if content and content.get("number") is not None:
        issue = RawIssue(
            node_id=content["id"],
            number=content["number"],
            title=content.get("title") or "",
            body=content.get("body"),
            state=(content.get("state") or "OPEN").lower(),
            state_reason=content.get("stateReason"),
            assignees=[a["login"] for a in content.get("assignees", {}).get("nodes", [])],
            labels=[label["name"] for label in content.get("labels", {}).get("nodes", [])],
            milestone=(content.get("milestone") or {}).get("title"),
            created_at=content.get("createdAt"),
            updated_at=content.get("updatedAt"),
            closed_at=content.get("closedAt"),
            repository=content["repository"]["nameWithOwner"],
        )
    return RawProjectItem(id=node["id"], field_values=field_values, content=issue)


def fetch_project(
    client: GitHubClient,
    owner: str,
    project_number: int,
    owner_type: Literal["user", "organization"] = "user",
) -> RawProject:
    """Fetch a project with all of its issue items, following pagination."""
    query = GET_ORG_PROJECT_ITEMS if owner_type == "organization" else GET_USER_PROJECT_ITEMS
    root_key = "organization" if owner_type == "organization" else "user"

    items: list[RawProjectItem] = []
    fields: list[RawField] = []
    node_id = ""
    title = ""
    cursor: str | None = None

    while True:
        data = client.query(query, {"owner": owner, "number": project_number, "cursor": cursor})
        project = (data.get(root_key) or {}).get("projectV2")
        if not project:
            raise GitHubClientError(f"Project #{project_number} not found for {owner}")

        node_id = project["id"]
        title = project.get("title", "")
        fields = [
            RawField(
                id=f["id"],
                name=f["name"],
                options={o["name"]: o["id"] for o in f.get("options", [])},
            )
            for f in project["fields"]["nodes"]
            if f.get("id")
        ]

        for node in project["items"]["nodes"]:
            item = _parse_item(node)
            if item.content is not None:
                items.append(item)

        page_info = project["items"]["pageInfo"]
        if not page_info["hasNextPage"]:
            break
        cursor = page_info["endCursor"]

    logger.info("Fetched project '%s' with %d item(s)", title, len(items))
    return RawProject(node_id=node_id, title=title, fields=fields, items=items)


def fetch_repository_milestones(client: GitHubClient, owner: str, repo: str) -> list[RawMilestone]:
    """Fetch every open and closed milestone of a repository."""
    milestones: list[RawMilestone] = []
    cursor: str | None = None

    while True:
        data = client.query(GET_REPOSITORY_MILESTONES, {"owner": owner, "name": repo, "cursor": cursor})
        connection = data["repository"]["milestones"]
        for node in connection["nodes"]:
            milestones.append(
                RawMilestone(
                    node_id=node["id"],
                    number=node["number"],
                    title=node["title"],
                    description=node.get("description"),
                    due_on=node.get("dueOn"),
                    state=node.get("state", "OPEN"),
                    created_at=node.get("createdAt"),
                    updated_at=node.get("updatedAt"),
                    closed_at=node.get("closedAt"),
                )
            )
        if not connection["pageInfo"]["hasNextPage"]:
            break
        cursor = connection["pageInfo"]["endCursor"]

    logger.debug("Fetched %d milestone(s) from %s/%s", len(milestones), owner, repo)
    return milestones


def fetch_issue_relationships(
    client: GitHubClient, repository: str, number: int
) -> tuple[list[SubIssueLink], list[BlockedByLink]]:
    """Fetch the sub-issues and blockers of one issue."""
    owner, name = repository.split("/", 1)
    data = client.query(GET_ISSUE_RELATIONSHIPS, {"owner": owner, "name": name, "number": number})
    issue = (data.get("repository") or {}).get("issue") or {}

    sub_links = [
        SubIssueLink(
            parent_repo=repository,
            parent_number=number,
            child_repo=child["repository"]["nameWithOwner"],
            child_number=child["number"],
        )
        for child in (issue.get("subIssues") or {}).get("nodes", [])
    ]
    blocked_links = [
        BlockedByLink(
            blocked_repo=repository,
            blocked_number=number,
            blocking_repo=blocker["repository"]["nameWithOwner"],
            blocking_number=blocker["number"],
        )
        for blocker in (issue.get("blockedBy") or {}).get("nodes", [])
    ]
    return sub_links, blocked_links


def fetch_all_relationship_links(
    client: GitHubClient, issues: list[tuple[str, int]]
) -> tuple[list[SubIssueLink], list[BlockedByLink]]:
    """Fetch relationships for every (repository, number), one issue at a time.

    The relationships API is not available everywhere, so a failure on one
    issue is logged and skipped. Rate limiting stops the whole fetch.
    """
    sub_links: list[SubIssueLink] = []
    blocked_links: list[BlockedByLink] = []

    for repository, number in issues:
        try:
            subs, blockers = fetch_issue_relationships(client, repository, number)
        except GitHubRateLimitError:
            raise
        except GitHubClientError as e:
            logger.warning("Could not fetch relationships for %s#%d: %s", repository, number, e)
            continue
        sub_links.extend(subs)
        blocked_links.extend(blockers)

    logger.debug(
        "Fetched %d sub-issue link(s) and %d blocked-by link(s)", len(sub_links), len(blocked_links)
    )
    return sub_links, blocked_links


def lookup_identities(
    client: GitHubClient, owner: str, repo: str, logins: list[str]
) -> RepositoryMetadata:
    """Resolve repository, label, milestone and user node IDs in one query."""
    logins = sorted(set(logins))
    variables: dict[str, Any] = {"owner": owner, "name": repo}
    for i, login in enumerate(logins):
        variables[f"u{i}"] = login

    data = client.query(build_identity_lookup_query(len(logins)), variables)
    repository = data["repository"]

    metadata = RepositoryMetadata(
        repository_id=repository["id"],
        label_ids={n["name"]: n["id"] for n in repository["labels"]["nodes"]},
        milestone_ids={n["title"]: n["id"] for n in repository["milestones"]["nodes"]},
    )
    for i, login in enumerate(logins):
        user = data.get(f"u{i}")
        if user:
            metadata.user_ids[login] = user["id"]
        else:
            logger.warning("Unknown GitHub user '%s', assignee will be skipped", login)
    return metadata
