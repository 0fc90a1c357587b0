"""Letting the user edit text in their editor."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile

from avtool.git.repo import GitError, Repo

log = logging.getLogger(__name__)

#: A command that launches no editor and returns the text unchanged, as git
#: treats it in GIT_EDITOR.
COMMAND_NO_OP = ":"

DEFAULT_TMP_FILE_PATTERN = "av-message-*"

# The editor git falls back to when nothing is configured.
_FALLBACK_EDITOR = "vi"


class EditorError(Exception):
    """The editor could not be run or exited with an error.

    ``text`` holds whatever could still be read back from the edited file.
    """

    def __init__(self, message: str, text: str = ""):
        super().__init__(message)
        self.text = text


def default_command(repo: Repo) -> str:
    """Return the editor git would use for this repository."""
    try:
        return repo.git("var", "GIT_EDITOR")
    except GitError as exc:
        log.warning("failed to determine desired editor from git config: %s", exc)
        return _FALLBACK_EDITOR


def _split_pattern(pattern: str) -> tuple[str, str]:
    if "*" in pattern:
        prefix, _, suffix = pattern.rpartition("*")
        return prefix, suffix
    return pattern, ""


def _parse_result(path: str, comment_prefix: str, end_of_line_comments: bool) -> str:
    with open(path, encoding="utf-8", errors="replace", newline="") as f:
        content = f.read()
    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    kept = []
    for line in lines:
        line = line.removesuffix("\r")
        if line.startswith(comment_prefix):
            continue
        if end_of_line_comments:
            line = line.partition(comment_prefix)[0]
        kept.append(line + "\n")
    return "".join(kept)


def launch(
    repo: Repo | None,
    text: str,
    comment_prefix: str,
    end_of_line_comments: bool = False,
    command: str | None = None,
    tmp_file_pattern: str | None = None,
) -> str:
    """Open ``text`` in an editor and return the edited result.

    Lines starting with ``comment_prefix`` are dropped; with
    ``end_of_line_comments`` everything from the prefix to the end of a line
    is dropped too. Without ``command`` the editor configured for git in
    ``repo`` is used. The command is split with shell syntax so it may carry
    flags or a quoted path. Raises EditorError when the editor fails.
    """
    if not command:
        if repo is None:
            raise EditorError("no editor command given and no repository to ask git")
        command = default_command(repo)
    if command == COMMAND_NO_OP:
        return text

    prefix, suffix = _split_pattern(tmp_file_pattern or DEFAULT_TMP_FILE_PATTERN)
    fd, path = tempfile.mkstemp(prefix=prefix, suffix=suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)

        try:
            args = shlex.split(command)
        except ValueError as exc:
            raise EditorError(f"invalid editor command: {command!r}: {exc}") from exc
        if not args:
            raise EditorError(f"invalid editor command: {command!r}")
        args.append(path)

        log.debug("launching editor: %s", args)
        failure: str | None = None
        try:
            proc = subprocess.run(args, stderr=subprocess.PIPE)
        except OSError as exc:
            failure = str(exc)
        else:
            if proc.returncode != 0:
                stderr = proc.stderr.decode("utf-8", errors="replace").strip()
                failure = f"exit status {proc.returncode}" + (f": {stderr}" if stderr else "")

        if failure is not None:
            try:
                partial = _parse_result(path, comment_prefix, end_of_line_comments)
            except OSError:
                partial = ""
            raise EditorError(f"command {command!r} failed: {failure}", text=partial)

        return _parse_result(path, comment_prefix, end_of_line_comments)
    finally:
        try:
            os.remove(path)
        except OSError as exc:
            log.warning("failed to remove temporary file: %s", exc)