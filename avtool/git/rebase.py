"""Running ``git rebase`` and interpreting its outcome."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from avtool.git.repo import Repo, RunResult

log = logging.getLogger(__name__)


class RebaseStatus(Enum):
    """Outcome of a rebase."""

    ALREADY_UP_TO_DATE = 0
    UPDATED = 1
    CONFLICT = 2
    NOT_IN_PROGRESS = 3
    #: An in-progress rebase was aborted (only reported for an abort).
    ABORTED = 4


@dataclass(frozen=True)
class RebaseResult:
    status: RebaseStatus
    hint: str = ""
    #: The "headline" of the error message, if any.
    error_headline: str = ""


_CARRIAGE_RETURN = re.compile(r"^.+\r")
_HINT_LINE = re.compile(r"^hint:.+$\n?", re.MULTILINE)
_ERROR_LINE = re.compile(r"^error: (.+)$", re.MULTILINE)


def rebase(
    repo: Repo,
    upstream: str | None = None,
    onto: str | None = None,
    branch: str | None = None,
    continue_: bool = False,
    abort: bool = False,
    skip: bool = False,
) -> RunResult:
    """Run ``git rebase`` and return the raw result.

    ``continue_``, ``abort`` and ``skip`` each exclude every other option;
    otherwise ``upstream`` is required.
    """
    if continue_:
        # Continuing would open an editor for the commit message; `true`
        # accepts the message unchanged.
        return repo.run(["rebase", "--continue"], env={"GIT_EDITOR": "true"})
    if abort:
        return repo.run(["rebase", "--abort"])
    if skip:
        return repo.run(["rebase", "--skip"])
    if not upstream:
        raise ValueError("upstream is required to start a rebase")
    args = ["rebase"]
    if onto:
        args.extend(["--onto", onto])
    args.append(upstream)
    if branch:
        args.append(branch)
    return repo.run(args)


def rebase_parse(
    repo: Repo,
    upstream: str | None = None,
    onto: str | None = None,
    branch: str | None = None,
    continue_: bool = False,
    abort: bool = False,
    skip: bool = False,
) -> RebaseResult:
    """Run ``git rebase`` and interpret its output."""
    output = rebase(
        repo,
        upstream=upstream,
        onto=onto,
        branch=branch,
        continue_=continue_,
        abort=abort,
        skip=skip,
    )
    return parse_rebase_result(output, abort=abort)


def normalize_rebase_hint(stderr: bytes | str) -> str:
    """Clean up rebase stderr for display.

    Text before a carriage return on the first line is dropped (as a terminal
    would overwrite it), ``hint:`` lines are removed, and references to
    ``git rebase`` are replaced with ``av sync``.
    """
    text = stderr.decode("utf-8", errors="replace") if isinstance(stderr, bytes) else stderr
    text = _CARRIAGE_RETURN.sub("", text)
    text = _HINT_LINE.sub("", text)
    return text.replace("git rebase", "av sync")


def parse_rebase_result(output: RunResult, abort: bool = False) -> RebaseResult:
    """Interpret the result of a ``git rebase`` invocation."""
    stdout = output.stdout.decode("utf-8", errors="replace")
    stderr = output.stderr.decode("utf-8", errors="replace")

    if output.exit_code == 0:
        if "Successfully rebased" in stderr:
            return RebaseResult(RebaseStatus.UPDATED)
        # Only this message is printed to stdout; everything else goes to stderr.
        if "is up to date" in stdout:
            return RebaseResult(RebaseStatus.ALREADY_UP_TO_DATE)
        if abort:
            return RebaseResult(RebaseStatus.ABORTED)
        log.warning(
            "unexpected output from git rebase with exit code 0 "
            "(assuming rebase was successful): stdout=%r stderr=%r",
            stdout,
            stderr,
        )
        return RebaseResult(RebaseStatus.UPDATED)

    lowered = stderr.lower()
    if "no rebase in progress" in lowered:
        status = RebaseStatus.NOT_IN_PROGRESS
    elif "could not apply" in lowered:
        status = RebaseStatus.CONFLICT
    else:
        log.warning(
            "unexpected output from git rebase with non-zero exit code %d "
            "(assuming rebase had conflicts): %s",
            output.exit_code,
            stderr,
        )
        return RebaseResult(RebaseStatus.CONFLICT, hint=stderr)

    hint = normalize_rebase_hint(stderr)
    match = _ERROR_LINE.search(hint)
    headline = match.group(1) if match else ""
    return RebaseResult(status, hint=hint, error_headline=headline)