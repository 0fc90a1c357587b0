"""A small GitHub GraphQL API client."""

from __future__ import annotations

import json
import logging
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Mapping

log = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://api.github.com/graphql"
DEFAULT_TIMEOUT = 60.0


class GitHubError(Exception):
    """A GitHub API request failed.

    ``status`` holds the HTTP status code when the server answered with one.
    """

    def __init__(self, message: str, *, status: int | None = None):
        super().__init__(message)
        self.status = status


@dataclass(frozen=True)
class PageInfo:
    """Cursor information for one page of a paginated result."""

    end_cursor: str = ""
    has_next_page: bool = False
    has_previous_page: bool = False
    start_cursor: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> PageInfo:
        """Build from a GraphQL ``pageInfo`` object."""
        data = data or {}
        return cls(
            end_cursor=data.get("endCursor") or "",
            has_next_page=bool(data.get("hasNextPage")),
            has_previous_page=bool(data.get("hasPreviousPage")),
            start_cursor=data.get("startCursor") or "",
        )


def is_http_unauthorized(err: BaseException) -> bool:
    """Tell whether an error came from an HTTP 401 Unauthorized response."""
    return "status code: 401" in str(err)


class Client:
    """Sends GraphQL queries and mutations to GitHub."""

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        if not token:
            raise ValueError("no GitHub token provided (do you need to configure one?)")
        self._token = token
        self.endpoint = base_url + "/api/graphql" if base_url else DEFAULT_ENDPOINT
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"Client({self.endpoint!r})"

    def _post(self, document: str, variables: Mapping[str, Any] | None) -> dict[str, Any]:
        payload: dict[str, Any] = {"query": document}
        if variables:
            payload["variables"] = dict(variables)
        request = urllib.request.Request(
            self.endpoint,
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "Authorization": f"Bearer {self._token}",
            },
            method="POST",
        )
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                body = response.read()
        except urllib.error.HTTPError as exc:
            text = exc.read().decode("utf-8", errors="replace")
            raise GitHubError(
                f"non-200 OK status code: {exc.code} {exc.reason} body: {text!r}",
                status=exc.code,
            ) from exc
        except urllib.error.URLError as exc:
            raise GitHubError(f"request to {self.endpoint} failed: {exc.reason}") from exc
        except OSError as exc:
            raise GitHubError(f"request to {self.endpoint} failed: {exc}") from exc

        try:
            result = json.loads(body)
        except ValueError as exc:
            raise GitHubError(f"invalid JSON in GitHub response: {exc}") from exc
        if not isinstance(result, dict):
            raise GitHubError("unexpected GitHub response: not a JSON object")
        errors = result.get("errors")
        if errors:
            messages = [
                err.get("message", str(err)) if isinstance(err, dict) else str(err)
                for err in errors
            ]
            raise GitHubError("; ".join(messages))
        return result.get("data") or {}

    def _execute(
        self, kind: str, document: str, variables: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        log.debug("executing GitHub API %s... variables=%r", kind, variables)
        start = time.monotonic()
        try:
            data = self._post(document, variables)
        except GitHubError as exc:
            log.debug(
                "GitHub API %s failed (%.3fs): %s", kind, time.monotonic() - start, exc
            )
            raise
        log.debug(
            "GitHub API %s succeeded (%.3fs): result=%r", kind, time.monotonic() - start, data
        )
        return data

    def query(
        self, query: str, variables: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Run a GraphQL query and return its ``data`` object."""
        return self._execute("query", query, variables)

    def mutate(
        self,
        mutation: str,
        input: Mapping[str, Any],
        variables: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Run a GraphQL mutation with ``input`` bound to ``$input``."""
        merged = {**(variables or {}), "input": dict(input)}
        return self._execute("mutation", mutation, merged)