"""Lookups of repositories, teams and users."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from avtool.gh.client import Client, GitHubError


@dataclass(frozen=True)
class Repository:
    id: str = ""
    #: Login of the owning user or organization.
    owner: str = ""
    name: str = ""


@dataclass(frozen=True)
class Team:
    id: str = ""
    name: str = ""
    slug: str = ""


@dataclass(frozen=True)
class User:
    id: str = ""
    login: str = ""


@dataclass(frozen=True)
class Viewer:
    """The authenticated user."""

    name: str = ""
    login: str = ""


def _obj(data: Any) -> Mapping[str, Any]:
    return data if isinstance(data, Mapping) else {}


def get_repository_by_slug(client: Client, slug: str) -> Repository:
    """Fetch a repository named ``<owner>/<repo>``."""
    owner, sep, name = slug.partition("/")
    if not sep:
        raise ValueError(f"unable to parse repository slug (expected <owner>/<repo>): {slug!r}")
    document = (
        "query($owner: String!, $name: String!) {\n"
        "  repository(owner: $owner, name: $name) { id owner { login } name }\n}"
    )
    try:
        data = client.query(document, {"owner": owner, "name": name})
    except GitHubError as exc:
        raise GitHubError(
            f"unable to fetch repository from GitHub: {exc}", status=exc.status
        ) from exc
    repo = _obj(data.get("repository"))
    return Repository(
        id=repo.get("id") or "",
        owner=_obj(repo.get("owner")).get("login") or "",
        name=repo.get("name") or "",
    )


def organization_team(client: Client, organization_login: str, team_slug: str) -> Team:
    """Fetch a team of an organization."""
    document = (
        "query($organizationLogin: String!, $teamSlug: String!) {\n"
        "  organization(login: $organizationLogin) {\n"
        "    id\n    team(slug: $teamSlug) { id name slug }\n  }\n}"
    )
    data = client.query(
        document, {"organizationLogin": organization_login, "teamSlug": team_slug}
    )
    org = _obj(data.get("organization"))
    if not org.get("id"):
        raise GitHubError(f"GitHub organization {organization_login!r} not found")
    team = _obj(org.get("team"))
    if not team.get("id"):
        raise GitHubError(
            f"GitHub team {team_slug!r} not found within organization {organization_login!r}"
        )
    return Team(id=team["id"], name=team.get("name") or "", slug=team.get("slug") or "")


def user(client: Client, login: str) -> User:
    """Fetch a user by login."""
    document = "query($login: String!) {\n  user(login: $login) { id login }\n}"
    data = client.query(document, {"login": login})
    found = _obj(data.get("user"))
    if not found.get("id"):
        raise GitHubError(f"GitHub user {login!r} not found")
    return User(id=found["id"], login=found.get("login") or "")


def viewer(client: Client) -> Viewer:
    """Fetch the authenticated user."""
    data = client.query("query {\n  viewer { name login }\n}")
    found = _obj(data.get("viewer"))
    return Viewer(name=found.get("name") or "", login=found.get("login") or "")