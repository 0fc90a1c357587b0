import pytest

from avtool.avgql import NotAuthenticatedError, ViewerSubquery, is_http_unauthorized
from avtool.gh.client import GitHubError


def test_from_dict_reads_viewer_fields():
    sub = ViewerSubquery.from_dict(
        {"viewer": {"email": "someone@example.com", "fullName": "Some One"}}
    )
    assert sub.email == "someone@example.com"
    assert sub.full_name == "Some One"


def test_from_dict_missing_viewer_gives_empty_fields():
    sub = ViewerSubquery.from_dict({})
    assert sub == ViewerSubquery()


def test_from_dict_none():
    assert ViewerSubquery.from_dict(None).email == ""


def test_check_viewer_without_email_raises():
    with pytest.raises(NotAuthenticatedError, match="not logged in to Aviator"):
        ViewerSubquery.from_dict({"viewer": {"email": None}}).check_viewer()


def test_check_viewer_with_email_passes():
    sub = ViewerSubquery(email="someone@example.com")
    assert sub.check_viewer() is None
    assert sub.email == "someone@example.com"


def test_is_http_unauthorized_true_for_401():
    err = GitHubError("non-200 OK status code: 401 Unauthorized body: ''", status=401)
    assert is_http_unauthorized(err) is True


def test_is_http_unauthorized_false_for_other_status():
    assert is_http_unauthorized(GitHubError("non-200 OK status code: 500 oops")) is False
    assert is_http_unauthorized(ValueError("boom")) is False