"""Listing reachable commits with ``git rev-list``."""

from __future__ import annotations

from typing import Iterable

from avtool.git.repo import Repo


def rev_list(repo: Repo, specifiers: Iterable[str] = (), reverse: bool = False) -> list[str]:
    """List the commits reachable from ``specifiers``.

    A specifier starting with ``^`` excludes the commits reachable from it, and
    ``a..b`` is the same as ``^a b``. With ``reverse`` the commits come in
    chronological order instead of newest first.
    """
    args = ["rev-list"]
    if reverse:
        args.append("--reverse")
    args.extend(specifiers)
    return repo.run(args, exit_error=True).lines()