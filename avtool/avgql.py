"""Helpers for the Aviator GraphQL API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

#: Selection to embed in a query so the result can be checked with
#: ViewerSubquery.check_viewer.
VIEWER_SELECTION = "viewer { email fullName }"


class NotAuthenticatedError(Exception):
    """The API token was not accepted."""

    def __init__(
        self,
        message: str = (
            "You are not logged in to Aviator. Please verify that your API token is correct."
        ),
    ):
        super().__init__(message)


def is_http_unauthorized(err: BaseException) -> bool:
    """Tell whether an error came from an HTTP 401 Unauthorized response."""
    # The transport reports the status only in the error text.
    return "status code: 401" in str(err)


@dataclass(frozen=True)
class ViewerSubquery:
    """The viewer's identity, fetched alongside another query."""

    email: str = ""
    full_name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ViewerSubquery:
        """Build from a query result that holds a ``viewer`` object."""
        viewer = (data or {}).get("viewer")
        if not isinstance(viewer, Mapping):
            viewer = {}
        return cls(
            email=viewer.get("email") or "",
            full_name=viewer.get("fullName") or "",
        )

    def check_viewer(self) -> None:
        """Raise NotAuthenticatedError unless the viewer is authenticated."""
        if not self.email:
            raise NotAuthenticatedError()