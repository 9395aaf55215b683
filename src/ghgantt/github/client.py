"""GitHub API client (GraphQL plus the REST milestone endpoint)."""

from __future__ import annotations

import logging
import os
import re
import subprocess
import time
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "api.github.com"
TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")


class GitHubClientError(Exception):
    """Any failure talking to GitHub."""

    pass


class GitHubAuthError(GitHubClientError):
    """Missing or rejected token."""

    pass


class GitHubNotFoundError(GitHubClientError):
    """Project, repository or issue does not exist (or is hidden)."""

    pass


class GitHubForbiddenError(GitHubClientError):
    """Token lacks a required scope."""

    pass


class GitHubRateLimitError(GitHubClientError):
    """Primary or secondary rate limit hit."""

    pass


# GraphQL error "type" -> exception, checked before message sniffing
_GRAPHQL_ERROR_TYPES: dict[str, type[GitHubClientError]] = {
    "RATE_LIMITED": GitHubRateLimitError,
    "NOT_FOUND": GitHubNotFoundError,
    "FORBIDDEN": GitHubForbiddenError,
}

_GRAPHQL_ERROR_PHRASES: tuple[tuple[str, type[GitHubClientError]], ...] = (
    ("rate limit", GitHubRateLimitError),
    ("not found", GitHubNotFoundError),
    ("permission", GitHubForbiddenError),
)

_OP_NAME_RE = re.compile(r"(?:query|mutation)\s+(\w+)")


def _ms_since(started: float) -> float:
    return (time.monotonic() - started) * 1000


class GitHubClient:
    """GitHub API client.

    Every request goes through ``_post``, which times the call, wraps
    transport failures and maps HTTP statuses onto the exception hierarchy.
    GraphQL requests additionally map the ``errors`` array. Milestones cannot
    be created through GraphQL, so ``create_milestone`` uses REST.
    """

    def __init__(self, token: str, base_url: str = DEFAULT_BASE_URL):
        """Create a client bound to one API host.

        Args:
            token: Personal access token or gh CLI token
            base_url: API host (default: api.github.com, e.g. ghe.example.com/api
                for Enterprise)
        """
        self.token = token
        self.base_url = base_url
        self._graphql_url = f"https://{base_url}/graphql"
        # Enterprise serves REST under /api/v3 next to /api/graphql
        self._rest_url = f"https://{base_url}" if base_url == DEFAULT_BASE_URL else f"https://{base_url}/v3"
        self._client = httpx.Client(
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            timeout=30.0,
        )

    def close(self) -> None:
        """Release the underlying connection pool."""
        self._client.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @classmethod
    def from_environment(cls, base_url: str = DEFAULT_BASE_URL) -> GitHubClient:
        """Create a client from a token in the environment or the gh CLI.

        ``GITHUB_TOKEN`` and ``GH_TOKEN`` are checked first; otherwise
        ``gh auth token`` is asked, for the Enterprise host when
        ``base_url`` is not github.com.

        Raises:
            GitHubAuthError: Neither source yields a token
        """
        for name in TOKEN_ENV_VARS:
            token = os.environ.get(name)
            if token:
                logger.debug("Using token from %s", name)
                return cls(token, base_url)

        command = ["gh", "auth", "token"]
        if base_url != DEFAULT_BASE_URL:
            command += ["--hostname", base_url.split("/", 1)[0]]
        try:
            result = subprocess.run(command, capture_output=True, text=True, check=True)
        except (subprocess.CalledProcessError, FileNotFoundError):
            logger.debug("No token from %s", " ".join(command))
        else:
            cli_token = result.stdout.strip()
            if cli_token:
                logger.debug("Using token from %s", " ".join(command))
                return cls(cli_token, base_url)

        logger.error("No GitHub token in %s or gh CLI", "/".join(TOKEN_ENV_VARS))
        raise GitHubAuthError(
            "No GitHub token found. Export GITHUB_TOKEN (or GH_TOKEN), "
            "or sign in with 'gh auth login'."
        )

    def _post(
        self,
        url: str,
        payload: dict[str, Any],
        op_name: str,
        headers: dict[str, str] | None = None,
    ) -> tuple[Any, float]:
        """POST ``payload`` and return the decoded JSON body with the elapsed ms."""
        started = time.monotonic()
        try:
            response = self._client.post(url, json=payload, headers=headers)
        except httpx.RequestError as e:
            logger.error("%s: transport error after %.0fms: %s", op_name, _ms_since(started), e)
            raise GitHubClientError(f"Request failed: {e}") from e
        elapsed_ms = _ms_since(started)

        status = response.status_code
        if status == 401:
            logger.error("%s: 401 Unauthorized (%.0fms)", op_name, elapsed_ms)
            raise GitHubAuthError(
                "Authentication failed: GitHub rejected the token. "
                "ghgantt needs the project and repo scopes."
            )
        if status == 429 or (status == 403 and "rate limit" in response.text.lower()):
            logger.error("%s: %d Rate Limited (%.0fms)", op_name, status, elapsed_ms)
            raise GitHubRateLimitError("Rate limited by GitHub; wait a few minutes and retry.")
        if status == 403:
            logger.error("%s: 403 Forbidden (%.0fms)", op_name, elapsed_ms)
            raise GitHubForbiddenError(
                "Forbidden: the token needs the 'project' scope for the board "
                "and 'repo' for issues and milestones."
            )
        if status == 404:
            logger.error("%s: 404 Not Found (%.0fms)", op_name, elapsed_ms)
            raise GitHubNotFoundError(f"Not found: {url}")
        if status >= 400:
            logger.error("%s: HTTP %d (%.0fms)", op_name, status, elapsed_ms)
            raise GitHubClientError(f"HTTP {status}: {response.text}")

        try:
            return response.json(), elapsed_ms
        except ValueError as e:
            logger.error("%s: Invalid JSON response (%.0fms)", op_name, elapsed_ms)
            raise GitHubClientError(f"Response from {url} is not JSON: {e}") from e

    def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run one GraphQL document against the project API.

        Returns:
            The ``data`` field of the response (empty dict when absent)

        Raises:
            GitHubClientError: Or one of its subclasses, for HTTP and GraphQL
                failures alike
        """
        op_match = _OP_NAME_RE.search(query)
        op_name = f"GraphQL {op_match.group(1) if op_match else 'anonymous'}"

        payload: dict[str, Any] = {"query": query, **({"variables": variables} if variables else {})}
        logger.debug("%s: variables=%s", op_name, variables)

        result, elapsed_ms = self._post(self._graphql_url, payload, op_name)

        errors = result.get("errors")
        if errors:
            self._raise_for_graphql_errors(errors, op_name, elapsed_ms)

        logger.info("%s: 200 OK (%.0fms)", op_name, elapsed_ms)
        return result.get("data") or {}

    def _raise_for_graphql_errors(
        self, errors: list[dict[str, Any]], op_name: str, elapsed_ms: float
    ) -> None:
        for error in errors:
            message = error.get("message") or ""
            error_class = _GRAPHQL_ERROR_TYPES.get(error.get("type", ""))
            if error_class is None:
                lowered = message.lower()
                error_class = next(
                    (cls for phrase, cls in _GRAPHQL_ERROR_PHRASES if phrase in lowered), None
                )
            if error_class is not None:
                logger.error("%s: %s - %s (%.0fms)", op_name, error_class.__name__, message, elapsed_ms)
                raise error_class(message)

        messages = [e.get("message", str(e)) for e in errors]
        logger.error("%s: errors=%s (%.0fms)", op_name, messages, elapsed_ms)
        raise GitHubClientError(f"GraphQL errors: {'; '.join(messages)}")

    def query(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Read-only counterpart of ``mutate``; both delegate to ``execute``."""
        return self.execute(query, variables)

    def mutate(self, mutation: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a GraphQL mutation."""
        return self.execute(mutation, variables)

    def create_milestone(
        self,
        owner: str,
        repo: str,
        title: str,
        description: str | None = None,
        due_on: str | None = None,
    ) -> dict[str, Any]:
        """Create a repository milestone through the REST API.

        Args:
            owner: Repository owner
            repo: Repository name
            title: Milestone title
            description: Optional description
            due_on: Optional due date (YYYY-MM-DD)

        Returns:
            The created milestone (``number``, ``node_id``, ``title``...)
        """
        op_name = "REST createMilestone"
        payload: dict[str, Any] = {"title": title}
        if description:
            payload["description"] = description
        if due_on:
            payload["due_on"] = f"{due_on}T00:00:00Z"
        logger.debug("%s: %s/%s payload=%s", op_name, owner, repo, payload)

        result, elapsed_ms = self._post(
            f"{self._rest_url}/repos/{owner}/{repo}/milestones",
            payload,
            op_name,
            headers={"Accept": "application/vnd.github+json"},
        )
        logger.info("%s: created #%s (%.0fms)", op_name, result.get("number"), elapsed_ms)
        return result
