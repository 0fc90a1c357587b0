import json
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from types import SimpleNamespace

import pytest

from avtool.gh.client import Client, GitHubError
from avtool.gh.pullrequest import (
    PullRequest,
    PullRequestState,
    convert_pull_request_to_draft,
    create_pull_request,
    get_pull_requests,
    mark_pull_request_ready_for_review,
    pull_request,
    repo_pull_requests,
    request_reviews,
    update_pull_request,
)


@pytest.fixture
def server():
    requests = []
    responses = []

    class Handler(BaseHTTPRequestHandler):
        def do_POST(self):
            length = int(self.headers.get("Content-Length", 0))
            requests.append(json.loads(self.rfile.read(length)))
            status, payload = responses.pop(0)
            data = json.dumps(payload).encode()
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(data)))
            self.end_headers()
            self.wfile.write(data)

        def log_message(self, *args):
            pass

    httpd = HTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield SimpleNamespace(
        client=Client("token", base_url=f"http://127.0.0.1:{httpd.server_port}"),
        requests=requests,
        responses=responses,
    )
    httpd.shutdown()
    httpd.server_close()


PR_DATA = {
    "id": "PR_1",
    "number": 42,
    "headRefName": "refs/heads/feature",
    "baseRefName": "main",
    "isDraft": True,
    "permalink": "https://github.example.com/o/r/pull/42",
    "state": "CLOSED",
    "title": "Add feature",
    "body": "Body text",
    "mergeCommit": None,
    "timelineItems": {
        "nodes": [
            {"closer": {"oid": "aaa"}},
            {"commit": {"oid": "bbb"}},
            {"closer": None},
        ]
    },
}


def test_from_dict():
    pr = PullRequest.from_dict(PR_DATA)
    assert pr.id == "PR_1"
    assert pr.number == 42
    assert pr.is_draft is True
    assert pr.state is PullRequestState.CLOSED
    assert pr.title == "Add feature"
    assert pr.timeline_commits == [("aaa", ""), ("", "bbb"), ("", "")]


def test_branch_names_strip_prefix():
    pr = PullRequest(head_ref_name="refs/heads/feature", base_ref_name="main")
    assert pr.head_branch_name() == "feature"
    assert pr.base_branch_name() == "main"


def test_merge_commit_open_is_empty():
    pr = PullRequest(state="OPEN", merge_commit_oid="abc", timeline_commits=[("x", "")])
    assert pr.merge_commit() == ""


def test_merge_commit_merged_uses_merge_oid():
    pr = PullRequest(state=PullRequestState.MERGED, merge_commit_oid="abc", timeline_commits=[("x", "")])
    assert pr.merge_commit() == "abc"


def test_merge_commit_uses_latest_timeline_event():
    pr = PullRequest.from_dict(PR_DATA)
    assert pr.merge_commit() == "bbb"


def test_merge_commit_without_events():
    assert PullRequest(state="CLOSED").merge_commit() == ""


def test_pull_request_found(server):
    server.responses.append((200, {"data": {"node": PR_DATA}}))
    pr = pull_request(server.client, "PR_1")
    assert pr.number == 42
    assert server.requests[0]["variables"] == {"id": "PR_1"}


def test_pull_request_not_found(server):
    server.responses.append((200, {"data": {"node": None}}))
    with pytest.raises(GitHubError, match="not found"):
        pull_request(server.client, "PR_missing")


def test_pull_request_query_error_is_wrapped(server):
    server.responses.append((200, {"errors": [{"message": "nope"}]}))
    with pytest.raises(GitHubError, match="failed to query pull request: nope"):
        pull_request(server.client, "PR_1")


def test_get_pull_requests_defaults(server):
    page_info = {"endCursor": "c", "hasNextPage": True, "hasPreviousPage": False, "startCursor": "s"}
    server.responses.append(
        (200, {"data": {"repository": {"pullRequests": {"nodes": [PR_DATA], "pageInfo": page_info}}}})
    )
    page = get_pull_requests(server.client, "o", "r", states=["OPEN"])
    assert [pr.id for pr in page.pull_requests] == ["PR_1"]
    assert page.page_info.end_cursor == "c"
    assert page.page_info.has_next_page
    variables = server.requests[0]["variables"]
    assert variables["first"] == 50
    assert variables["headRefName"] is None
    assert variables["after"] is None
    assert variables["states"] == ["OPEN"]


def test_repo_pull_requests(server):
    server.responses.append(
        (200, {"data": {"repository": {"pullRequests": {"totalCount": 7, "nodes": [], "pageInfo": None}}}})
    )
    page = repo_pull_requests(server.client, "o", "r", after="cur")
    assert page.total_count == 7
    assert page.pull_requests == []
    variables = server.requests[0]["variables"]
    assert variables["first"] == 100
    assert variables["after"] == "cur"
    assert variables["states"] is None


def test_create_and_update(server):
    server.responses.append((200, {"data": {"createPullRequest": {"pullRequest": PR_DATA}}}))
    server.responses.append((200, {"data": {"updatePullRequest": {"pullRequest": PR_DATA}}}))
    created = create_pull_request(server.client, {"title": "Add feature"})
    updated = update_pull_request(server.client, {"pullRequestId": "PR_1", "title": "T"})
    assert created == updated
    assert server.requests[0]["variables"]["input"] == {"title": "Add feature"}
    assert "createPullRequest" in server.requests[0]["query"]
    assert "updatePullRequest" in server.requests[1]["query"]


def test_request_reviews_defaults_union(server):
    server.responses.append((200, {"data": {"requestReviews": {"pullRequest": PR_DATA}}}))
    server.responses.append((200, {"data": {"requestReviews": {"pullRequest": PR_DATA}}}))
    request_reviews(server.client, {"pullRequestId": "PR_1"})
    request_reviews(server.client, {"pullRequestId": "PR_1", "union": False})
    assert server.requests[0]["variables"]["input"]["union"] is True
    assert server.requests[1]["variables"]["input"]["union"] is False


def test_draft_and_ready(server):
    server.responses.append((200, {"data": {"convertPullRequestToDraft": {"pullRequest": PR_DATA}}}))
    server.responses.append((200, {"data": {"markPullRequestReadyForReview": {"pullRequest": PR_DATA}}}))
    assert convert_pull_request_to_draft(server.client, "PR_1").id == "PR_1"
    assert mark_pull_request_ready_for_review(server.client, "PR_1").id == "PR_1"
    assert server.requests[0]["variables"]["input"] == {"pullRequestId": "PR_1"}
    assert server.requests[1]["variables"]["input"] == {"pullRequestId": "PR_1"}


def test_mutation_error_is_wrapped(server):
    server.responses.append((200, {"errors": [{"message": "denied"}]}))
    with pytest.raises(GitHubError, match="failed to create pull request: github error: denied"):
        create_pull_request(server.client, {"title": "x"})