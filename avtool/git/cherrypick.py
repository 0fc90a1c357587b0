"""Applying commits on top of HEAD with ``git cherry-pick``."""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from avtool.git.constants import short_sha
from avtool.git.repo import GitError, Repo


class CherryPickResume(str, Enum):
    """How to resume a cherry-pick interrupted by a conflict."""

    CONTINUE = "continue"
    SKIP = "skip"
    QUIT = "quit"
    ABORT = "abort"

    def __str__(self) -> str:
        return self.value


class CherryPickConflictError(GitError):
    """A commit could not be applied cleanly."""

    def __init__(self, conflicting_commit: str, output: str = ""):
        super().__init__(
            f"cherry-pick conflict: failed to apply {short_sha(conflicting_commit)}",
            stderr=output,
        )
        self.conflicting_commit = conflicting_commit
        self.output = output


def cherry_pick(
    repo: Repo,
    commits: Iterable[str] = (),
    no_commit: bool = False,
    fast_forward: bool = False,
    resume: CherryPickResume | str | None = None,
) -> None:
    """Apply ``commits`` on top of HEAD, or resume an interrupted cherry-pick.

    ``resume`` excludes every other option. Raises CherryPickConflictError when
    a commit does not apply.
    """
    args = ["cherry-pick"]
    if resume:
        args.append(f"--{CherryPickResume(resume).value}")
    else:
        if fast_forward:
            args.append("--ff")
        if no_commit:
            args.append("--no-commit")
        args.extend(commits)

    result = repo.run(args)
    if result.exit_code == 0:
        return

    try:
        head = repo.read_git_file("CHERRY_PICK_HEAD")
    except OSError as exc:
        raise GitError(
            f"expected CHERRY_PICK_HEAD to exist after cherry-pick failure: {exc}",
            stderr=result.stderr.decode("utf-8", errors="replace"),
            exit_code=result.exit_code,
        ) from exc
    raise CherryPickConflictError(
        conflicting_commit=head.strip(),
        output=result.stderr.decode("utf-8", errors="replace"),
    )