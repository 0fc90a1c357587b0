"""Working tree status from ``git status --porcelain=v2``."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from avtool.git.repo import Repo

_BRANCH_OID = re.compile(r"# branch\.oid ([0-9a-f]+)")
_BRANCH_OID_INITIAL = re.compile(r"# branch\.oid \(initial\)")
_BRANCH_HEAD = re.compile(r"# branch\.head (.+)")
_FILE_ORDINARY = re.compile(r"1 (..) .... ...... ...... ...... [0-9a-f]+ [0-9a-f]+ (.+)")
_FILE_RENAMED = re.compile(
    r"2 (..) .... ...... ...... ...... [0-9a-f]+ [0-9a-f]+ .+ (.+)\t.+"
)
_FILE_UNMERGED = re.compile(
    r"u .. .... ...... ...... ...... .... [0-9a-f]+ [0-9a-f]+ [0-9a-f]+ (.+)"
)
_FILE_UNTRACKED = re.compile(r"\? (.+)")


@dataclass
class GitStatus:
    """The state of the working tree and index."""

    #: Object id of HEAD; empty in a repository with no commits yet.
    oid: str = ""
    #: Short name of the current branch; empty when HEAD is detached.
    current_branch: str = ""
    unstaged_tracked_files: list[str] = field(default_factory=list)
    staged_tracked_files: list[str] = field(default_factory=list)
    unmerged_files: list[str] = field(default_factory=list)
    untracked_files: list[str] = field(default_factory=list)

    def is_clean_ignoring_untracked(self) -> bool:
        return not (self.unstaged_tracked_files or self.staged_tracked_files or self.unmerged_files)

    def is_clean(self) -> bool:
        return self.is_clean_ignoring_untracked() and not self.untracked_files


def _record_change(st: GitStatus, xy: str, path: str) -> None:
    if xy[0] != ".":
        st.staged_tracked_files.append(path)
    if xy[1] != ".":
        st.unstaged_tracked_files.append(path)


def _parse_line(line: str, st: GitStatus) -> None:
    if match := _BRANCH_OID.search(line):
        st.oid = match.group(1)
    elif _BRANCH_OID_INITIAL.search(line):
        st.oid = ""
    elif match := _BRANCH_HEAD.search(line):
        head = match.group(1)
        st.current_branch = "" if head == "(detached)" else head
    elif match := _FILE_ORDINARY.search(line):
        _record_change(st, match.group(1), match.group(2))
    elif match := _FILE_RENAMED.search(line):
        _record_change(st, match.group(1), match.group(2))
    elif match := _FILE_UNMERGED.search(line):
        st.unmerged_files.append(match.group(1))
    elif match := _FILE_UNTRACKED.search(line):
        st.untracked_files.append(match.group(1))


def parse_status(text: str) -> GitStatus:
    """Parse the output of ``git status --porcelain=v2 --branch``."""
    st = GitStatus()
    for line in text.split("\n"):
        _parse_line(line, st)
    return st


def status(repo: Repo) -> GitStatus:
    """Return the status of the repository's working tree."""
    return parse_status(repo.git("status", "--porcelain=v2", "--branch", "--untracked-files"))