"""Reading raw objects from a repository with ``git cat-file --batch``."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from avtool.git.repo import GitError, Repo

log = logging.getLogger(__name__)

_UNRESOLVED_TYPES = frozenset({"missing", "ambiguous"})


@dataclass
class ObjectItem:
    """One object read from the repository."""

    #: The revision exactly as it was requested.
    revision: str
    #: The object id the revision resolved to.
    oid: str
    #: The object type, or ``missing``/``ambiguous`` when it did not resolve.
    type: str
    #: The raw object contents; None for unresolved revisions.
    contents: bytes | None = None


@dataclass
class Commit:
    """The parsed contents of a commit object."""

    tree: str = ""
    parents: list[str] = field(default_factory=list)
    author: str = ""
    committer: str = ""
    message: str = ""

    def message_title(self) -> str:
        """Return the first line of the commit message."""
        return self.message.split("\n", 1)[0]


def get_refs(repo: Repo, revisions: Iterable[str]) -> list[ObjectItem]:
    """Read the objects named by ``revisions`` in one ``cat-file --batch`` call."""
    revisions = list(revisions)
    request = "".join(f"{rev}\n" for rev in revisions)
    out = repo.run(["cat-file", "--batch"], stdin=request, exit_error=True).stdout

    items: list[ObjectItem] = []
    pos = 0
    for rev in revisions:
        # Each entry is "<oid> SP <type> SP <size> LF <contents> LF",
        # or "<name> SP {missing|ambiguous} LF".
        newline = out.find(b"\n", pos)
        if newline < 0:
            raise GitError(f"failed to read cat-file output for revision {rev!r}")
        header = out[pos:newline].decode("utf-8", errors="replace").split()
        pos = newline + 1
        if len(header) < 2:
            raise GitError(f"failed to read cat-file output for revision {rev!r}")
        oid, obj_type = header[0], header[1]

        if obj_type in _UNRESOLVED_TYPES:
            items.append(ObjectItem(revision=rev, oid=oid, type=obj_type))
            continue

        if len(header) != 3 or not header[2].isdigit():
            raise GitError("failed to read cat-file output")
        size = int(header[2])
        contents = out[pos : pos + size]
        if len(contents) < size:
            log.debug(
                "failed to read contents from cat-file output: revision=%s size=%d read=%d",
                rev,
                size,
                len(contents),
            )
            raise GitError(f"failed to read cat-file output for revision {rev!r}")
        pos += size
        items.append(ObjectItem(revision=rev, oid=oid, type=obj_type, contents=contents))

        # The contents are followed by a newline unless the output ends here.
        if pos >= len(out):
            continue
        if out[pos : pos + 1] != b"\n":
            raise GitError("failed to read cat-file output")
        pos += 1

    return items


def parse_commit_contents(contents: bytes | str) -> Commit:
    """Parse the raw contents of a commit object.

    Raises ValueError when the header is malformed or lacks a tree, author or
    committer.
    """
    text = contents.decode("utf-8", errors="replace") if isinstance(contents, bytes) else contents
    commit = Commit()
    pos = 0
    while True:
        newline = text.find("\n", pos)
        if newline < 0:
            # An unterminated final header line ends the input.
            pos = len(text)
            break
        line = text[pos:newline]
        pos = newline + 1
        if line == "":
            # A blank line separates the header from the message.
            break
        key, sep, value = line.partition(" ")
        if not sep:
            raise ValueError("invalid commit format")
        if key == "tree":
            commit.tree = value
        elif key == "parent":
            commit.parents.append(value)
        elif key == "author":
            commit.author = value
        elif key == "committer":
            commit.committer = value

    if not commit.tree:
        raise ValueError("invalid commit format: missing tree")
    if not commit.author:
        raise ValueError("invalid commit format: missing author")
    if not commit.committer:
        raise ValueError("invalid commit format: missing committer")

    commit.message = text[pos:]
    return commit