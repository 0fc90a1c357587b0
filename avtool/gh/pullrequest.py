"""Pull request queries and mutations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping

from avtool.gh.client import Client, GitHubError, PageInfo

_REFS_HEADS = "refs/heads/"

_PR_FIELDS = """
      id
      number
      headRefName
      baseRefName
      isDraft
      permalink
      state
      title
      body
      mergeCommit { oid }
      timelineItems(last: 10, itemTypes: [CLOSED_EVENT, MERGED_EVENT]) {
        nodes {
          ... on ClosedEvent { closer { ... on Commit { oid } } }
          ... on MergedEvent { commit { oid } }
        }
      }
"""

_PAGE_INFO_FIELDS = "pageInfo { endCursor hasNextPage hasPreviousPage startCursor }"


class PullRequestState(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    MERGED = "MERGED"

    def __str__(self) -> str:
        return self.value


def _oid(obj: Any) -> str:
    if isinstance(obj, Mapping):
        return obj.get("oid") or ""
    return ""


@dataclass
class PullRequest:
    """A GitHub pull request."""

    id: str = ""
    number: int = 0
    head_ref_name: str = ""
    base_ref_name: str = ""
    is_draft: bool = False
    permalink: str = ""
    state: PullRequestState | None = None
    title: str = ""
    body: str = ""
    #: The merge commit GitHub reports for a merged pull request.
    merge_commit_oid: str = ""
    #: (closing commit, merge commit) of recent close/merge events, oldest first.
    timeline_commits: list[tuple[str, str]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.state is not None and not isinstance(self.state, PullRequestState):
            self.state = PullRequestState(self.state)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> PullRequest:
        """Build from a GraphQL pull request object."""
        data = data or {}
        nodes = (data.get("timelineItems") or {}).get("nodes") or []
        timeline = [
            (_oid(node.get("closer")), _oid(node.get("commit")))
            for node in nodes
            if isinstance(node, Mapping)
        ]
        state = data.get("state")
        return cls(
            id=data.get("id") or "",
            number=int(data.get("number") or 0),
            head_ref_name=data.get("headRefName") or "",
            base_ref_name=data.get("baseRefName") or "",
            is_draft=bool(data.get("isDraft")),
            permalink=data.get("permalink") or "",
            state=PullRequestState(state) if state else None,
            title=data.get("title") or "",
            body=data.get("body") or "",
            merge_commit_oid=_oid(data.get("mergeCommit")),
            timeline_commits=timeline,
        )

    def head_branch_name(self) -> str:
        # GitHub returns the ref as it was given, with or without refs/heads/.
        return self.head_ref_name.removeprefix(_REFS_HEADS)

    def base_branch_name(self) -> str:
        return self.base_ref_name.removeprefix(_REFS_HEADS)

    def merge_commit(self) -> str:
        """Return the commit that merged or closed this pull request, or ""."""
        if self.state is PullRequestState.OPEN:
            return ""
        if self.state is PullRequestState.MERGED and self.merge_commit_oid:
            return self.merge_commit_oid
        # The timeline is chronological; the latest event wins.
        for closer, merged in reversed(self.timeline_commits):
            if closer:
                return closer
            if merged:
                return merged
        return ""


@dataclass
class PullRequestsPage:
    """One page of pull requests."""

    page_info: PageInfo = field(default_factory=PageInfo)
    pull_requests: list[PullRequest] = field(default_factory=list)
    total_count: int | None = None


def _states(states: Iterable[PullRequestState | str] | None) -> list[str] | None:
    values = [PullRequestState(s).value for s in states or ()]
    return values or None


def pull_request(client: Client, id: str) -> PullRequest:
    """Fetch a pull request by its node id."""
    document = (
        "query($id: ID!) {\n  node(id: $id) {\n    ... on PullRequest {"
        + _PR_FIELDS
        + "    }\n  }\n}"
    )
    try:
        data = client.query(document, {"id": id})
    except GitHubError as exc:
        raise GitHubError(f"failed to query pull request: {exc}", status=exc.status) from exc
    pr = PullRequest.from_dict(data.get("node"))
    if not pr.id:
        raise GitHubError(f"pull request {id!r} not found")
    return pr


def get_pull_requests(
    client: Client,
    owner: str,
    repo: str,
    head_ref_name: str | None = None,
    base_ref_name: str | None = None,
    states: Iterable[PullRequestState | str] | None = None,
    first: int | None = None,
    after: str | None = None,
) -> PullRequestsPage:
    """List pull requests of a repository, optionally filtered by branch and state."""
    document = (
        "query($owner: String!, $repo: String!, $states: [PullRequestState!], "
        "$headRefName: String, $baseRefName: String, $first: Int!, $after: String) {\n"
        "  repository(owner: $owner, name: $repo) {\n"
        "    pullRequests(states: $states, headRefName: $headRefName, "
        "baseRefName: $baseRefName, first: $first, after: $after) {\n"
        "      nodes {" + _PR_FIELDS + "      }\n"
        "      " + _PAGE_INFO_FIELDS + "\n"
        "    }\n  }\n}"
    )
    variables = {
        "owner": owner,
        "repo": repo,
        "headRefName": head_ref_name or None,
        "baseRefName": base_ref_name or None,
        "states": _states(states),
        "first": first or 50,
        "after": after or None,
    }
    try:
        data = client.query(document, variables)
    except GitHubError as exc:
        raise GitHubError(f"failed to query pull requests: {exc}", status=exc.status) from exc
    prs = (data.get("repository") or {}).get("pullRequests") or {}
    return PullRequestsPage(
        page_info=PageInfo.from_dict(prs.get("pageInfo")),
        pull_requests=[PullRequest.from_dict(node) for node in prs.get("nodes") or []],
    )


def _mutate_pull_request(
    client: Client, name: str, input_type: str, input: Mapping[str, Any], action: str
) -> PullRequest:
    document = (
        f"mutation($input: {input_type}!) {{\n  {name}(input: $input) {{\n    pullRequest {{"
        + _PR_FIELDS
        + "    }\n  }\n}"
    )
    try:
        data = client.mutate(document, input)
    except GitHubError as exc:
        raise GitHubError(f"{action}: {exc}", status=exc.status) from exc
    return PullRequest.from_dict((data.get(name) or {}).get("pullRequest"))


def create_pull_request(client: Client, input: Mapping[str, Any]) -> PullRequest:
    """Open a pull request from a ``CreatePullRequestInput`` object."""
    return _mutate_pull_request(
        client,
        "createPullRequest",
        "CreatePullRequestInput",
        input,
        "failed to create pull request: github error",
    )


def update_pull_request(client: Client, input: Mapping[str, Any]) -> PullRequest:
    """Update a pull request from an ``UpdatePullRequestInput`` object."""
    return _mutate_pull_request(
        client,
        "updatePullRequest",
        "UpdatePullRequestInput",
        input,
        "failed to update pull request: github error",
    )


def request_reviews(client: Client, input: Mapping[str, Any]) -> PullRequest:
    """Request reviews on a pull request.

    Reviewers are added to the existing ones unless ``union`` is set to False.
    """
    payload = dict(input)
    if payload.get("union") is None:
        payload["union"] = True
    return _mutate_pull_request(
        client,
        "requestReviews",
        "RequestReviewsInput",
        payload,
        "failed to request pull request reviews",
    )


def convert_pull_request_to_draft(client: Client, id: str) -> PullRequest:
    return _mutate_pull_request(
        client,
        "convertPullRequestToDraft",
        "ConvertPullRequestToDraftInput",
        {"pullRequestId": id},
        "failed to convert pull request to draft: github error",
    )


def mark_pull_request_ready_for_review(client: Client, id: str) -> PullRequest:
    return _mutate_pull_request(
        client,
        "markPullRequestReadyForReview",
        "MarkPullRequestReadyForReviewInput",
        {"pullRequestId": id},
        "failed to mark pull request ready for review: github error",
    )


def repo_pull_requests(
    client: Client,
    owner: str,
    repo: str,
    first: int | None = None,
    after: str | None = None,
    states: Iterable[PullRequestState | str] | None = None,
) -> PullRequestsPage:
    """List a page of a repository's pull requests with the total count."""
    document = (
        "query($owner: String!, $repo: String!, $states: [PullRequestState!], "
        "$first: Int!, $after: String) {\n"
        "  repository(owner: $owner, name: $repo) {\n"
        "    pullRequests(states: $states, first: $first, after: $after) {\n"
        "      totalCount\n"
        "      " + _PAGE_INFO_FIELDS + "\n"
        "      nodes {" + _PR_FIELDS + "      }\n"
        "    }\n  }\n}"
    )
    variables = {
        "owner": owner,
        "repo": repo,
        "first": first or 100,
        "after": after or None,
        "states": _states(states),
    }
    try:
        data = client.query(document, variables)
    except GitHubError as exc:
        raise GitHubError(f"failed to query pull requests: {exc}", status=exc.status) from exc
    prs = (data.get("repository") or {}).get("pullRequests") or {}
    return PullRequestsPage(
        page_info=PageInfo.from_dict(prs.get("pageInfo")),
        pull_requests=[PullRequest.from_dict(node) for node in prs.get("nodes") or []],
        total_count=int(prs.get("totalCount") or 0),
    )