"""Listing refs with ``git for-each-ref``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from avtool.git.repo import GitError, Repo

# NUL-separated fields so that no ref value can be confused with a delimiter.
_REF_FORMAT = "%00".join(
    [
        "%(refname)",
        "%(objecttype)",
        "%(objectname)",
        "%(upstream)",
        "%(upstream:track)",
    ]
)


@dataclass(frozen=True)
class RefInfo:
    """A ref and the object it points to."""

    name: str
    type: str
    oid: str
    #: Full name of the upstream ref, e.g. ``refs/remotes/<remote>/<branch>``.
    upstream: str
    #: Tracking status relative to the upstream, empty when in sync or unset.
    upstream_status: str


def list_refs(repo: Repo, patterns: Iterable[str] = ()) -> list[RefInfo]:
    """List the refs of the repository, optionally only those matching ``patterns``."""
    out = repo.git("for-each-ref", "--format", _REF_FORMAT, *patterns)
    refs: list[RefInfo] = []
    for line in out.split("\n"):
        if not line:
            continue
        parts = line.split("\x00")
        if len(parts) != 5:
            raise GitError("internal error: failed to parse ref info (expected 5 parts)")
        name, obj_type, oid, upstream, status = parts
        refs.append(
            RefInfo(
                name=name,
                type=obj_type,
                oid=oid,
                upstream=upstream,
                upstream_status=status,
            )
        )
    return refs