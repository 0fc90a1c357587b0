"""Well-known git values shared by the repository helpers."""

from __future__ import annotations

from enum import Enum

#: The all-zero object id. Git treats it as "this object does not exist";
#: passing it as the old value of a ref update only creates the ref.
MISSING = "0" * 40

#: Length of the abbreviated object ids shown to users.
SHORT_SHA_LENGTH = 7


class ObjectType(str, Enum):
    """The kinds of objects stored in a git repository."""

    COMMIT = "commit"
    TREE = "tree"
    BLOB = "blob"
    TAG = "tag"

    def __str__(self) -> str:
        return self.value


class UpstreamStatus(str, Enum):
    """Status of a ref relative to its upstream, as in ``%(upstream:trackshort)``."""

    AHEAD = ">"
    BEHIND = "<"
    DIVERGENT = "<>"
    IN_SYNC = "="

    def __str__(self) -> str:
        return self.value


def short_sha(sha: str) -> str:
    """Return the abbreviated form of an object id."""
    return sha[:SHORT_SHA_LENGTH]