"""Commit summaries read with ``git show``."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from avtool.git.constants import short_sha
from avtool.git.repo import GitError, Repo

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommitInfo:
    """The identity and message of a commit."""

    hash: str = ""
    short_hash: str = ""
    subject: str = ""
    body: str = ""

    def body_with_prefix(self, prefix: str) -> list[str]:
        """Return the lines of the trimmed body, each preceded by ``prefix``."""
        return [prefix + line for line in self.body.strip().split("\n")]


def commit_info(repo: Repo, rev: str) -> CommitInfo:
    """Return the hash, subject and body of ``rev``."""
    # --quiet suppresses the diff that would otherwise follow the message.
    result = repo.run(["show", "--quiet", "--format=%H%n%s%n%b", rev], exit_error=True)
    text = result.stdout.decode("utf-8", errors="replace")
    log.debug("got commit info for %s: %r", rev, text)

    commit_hash, sep, rest = text.partition("\n")
    if not sep:
        raise GitError("git show: failed to parse commit hash")
    subject, sep, body = rest.partition("\n")
    if not sep:
        raise GitError("git show: failed to parse commit subject")
    return CommitInfo(
        hash=commit_hash,
        short_hash=short_sha(commit_hash),
        subject=subject,
        body=body,
    )