"""Comparing trees with ``git diff``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from avtool.git.repo import GitError, Repo


@dataclass(frozen=True)
class Diff:
    """The result of a diff."""

    #: True when there are no differences.
    empty: bool
    #: The diff text; always empty for a quiet diff.
    contents: str


def diff(
    repo: Repo,
    specifiers: Iterable[str] = (),
    quiet: bool = False,
    color: bool = False,
    paths: Iterable[str] = (),
) -> Diff:
    """Diff against the index, one commit, or between two commits.

    With no specifiers the working tree is compared with the index; with one,
    with that commit; with two (or an ``a..b`` range), the commits with each
    other. ``paths`` limits the comparison to those paths.
    """
    args = ["diff", "--exit-code"]
    if quiet:
        args.append("--quiet")
    if color:
        args.append("--color=always")
    args.extend(specifiers)
    # Always end the revisions with "--" so a revision named like a file is
    # never taken for a path.
    args.append("--")
    args.extend(paths)

    result = repo.run(args)
    contents = result.stdout.decode("utf-8", errors="replace")
    if result.exit_code == 1:
        return Diff(empty=False, contents=contents)
    if result.exit_code != 0:
        stderr = result.stderr.decode("utf-8", errors="replace")
        raise GitError(f"git diff failed: {stderr}", stderr=stderr, exit_code=result.exit_code)
    return Diff(empty=True, contents=contents)