"""Commit history read with ``git log``."""

from __future__ import annotations

import logging
import re
from typing import Iterable

from avtool.git.repo import Repo
from avtool.git.show import CommitInfo

log_ = logging.getLogger(__name__)

_CLOSE_COMMIT_PATTERN = re.compile(
    r"\b(?:close|closes|closed|fix|fixes|fixed|resolve|resolves|resolved)\W+#(\d+)\b",
    re.IGNORECASE | re.ASCII,
)

# Every field ends with a NUL byte so that message text cannot break parsing.
_LOG_FORMAT = "--format=%H%x00%h%x00%s%x00%b%x00"


def log(repo: Repo, revision_range: Iterable[str] = ()) -> list[CommitInfo]:
    """Return the commits in ``revision_range`` (as understood by git-log)."""
    revision_range = list(revision_range)
    result = repo.run(["log", _LOG_FORMAT, *revision_range, "--"], exit_error=True)
    log_.debug("got git-log for range %s", revision_range)

    text = result.stdout.decode("utf-8", errors="replace")
    # The piece after the final NUL is never a complete field.
    fields = iter(text.split("\x00")[:-1])
    return [
        CommitInfo(
            hash=commit_hash.strip(),
            short_hash=abbrev.strip(),
            subject=subject,
            body=body,
        )
        for commit_hash, abbrev, subject, body in zip(fields, fields, fields, fields)
    ]


def find_closes_pull_request_comments(commits: Iterable[CommitInfo]) -> dict[int, str]:
    """Map pull request numbers named by "closes #123"-style keywords to commit hashes."""
    closed: dict[int, str] = {}
    for commit in commits:
        for match in _CLOSE_COMMIT_PATTERN.finditer(commit.body):
            closed[int(match.group(1))] = commit.hash
    return closed