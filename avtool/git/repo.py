"""Access to a git working tree through the git command line."""

from __future__ import annotations

import logging
import os
import re
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Sequence
from urllib.parse import SplitResult, urlsplit

from avtool.git.constants import short_sha

log = logging.getLogger(__name__)

DEFAULT_REMOTE_NAME = "origin"


class GitError(Exception):
    """A git command failed."""

    def __init__(self, message: str, *, stderr: str = "", exit_code: int | None = None):
        super().__init__(message)
        self.stderr = stderr
        self.exit_code = exit_code


class RemoteNotFoundError(GitError):
    """The repository has no ``origin`` remote."""

    def __init__(self, message: str = "this repository doesn't have a remote origin"):
        super().__init__(message)


@dataclass(frozen=True)
class RunResult:
    """Outcome of a git invocation."""

    exit_code: int
    stdout: bytes = b""
    stderr: bytes = b""

    def lines(self) -> list[str]:
        """Return the non-empty stdout split into lines."""
        text = self.stdout.decode("utf-8", errors="replace").strip()
        return text.split("\n") if text else []


@dataclass(frozen=True)
class Origin:
    """The origin remote: its parsed URL and ``owner/repo`` slug."""

    url: SplitResult
    repo_slug: str


@dataclass(frozen=True)
class BranchAndCommit:
    commit: str
    branch: str


_SCP_LIKE = re.compile(r"^(?:(?P<user>[^@/]+)@)?(?P<host>[^:/]+):(?P<path>.*)$")


def parse_git_url(url: str) -> SplitResult:
    """Parse a git remote URL, including scp-like ``user@host:path`` forms."""
    url = url.strip()
    if not url:
        raise ValueError("empty git URL")
    if "://" in url:
        parts = urlsplit(url)
        if not parts.scheme:
            raise ValueError(f"invalid git URL: {url!r}")
        return parts
    match = _SCP_LIKE.match(url)
    if match:
        user, host, path = match["user"], match["host"], match["path"]
        netloc = f"{user}@{host}" if user else host
        if not path.startswith("/"):
            path = "/" + path
        return SplitResult("ssh", netloc, path, "", "")
    return SplitResult("file", "", url, "", "")


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


class Repo:
    """A git repository driven through the ``git`` executable."""

    def __init__(
        self,
        repo_dir: str | os.PathLike[str],
        git_dir: str | os.PathLike[str] | None = None,
        remote: str | None = None,
        additional_trunk_branches: Iterable[str] = (),
    ):
        self.repo_dir = Path(repo_dir)
        self.remote = remote
        self.additional_trunk_branches = tuple(additional_trunk_branches)
        self._log = logging.LoggerAdapter(log, {"repo": self.repo_dir.name})
        if git_dir is None:
            try:
                git_dir = self.git("rev-parse", "--absolute-git-dir")
            except GitError as exc:
                raise GitError(f"failed to open git repo: {exc}", stderr=exc.stderr) from exc
        self.git_dir = Path(git_dir)

    def __repr__(self) -> str:
        return f"Repo({str(self.repo_dir)!r})"

    @property
    def av_dir(self) -> Path:
        """Directory inside the git dir where the tool keeps its state."""
        return self.git_dir / "av"

    def av_tmp_dir(self) -> Path:
        """Return the tool's temporary directory, creating it if possible."""
        directory = self.av_dir / "tmp"
        # A failure here surfaces later when a file is created inside it.
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError:
            pass
        return directory

    @property
    def remote_name(self) -> str:
        return self.remote or DEFAULT_REMOTE_NAME

    def git(self, *args: str) -> str:
        """Run git and return its stripped stdout, raising GitError on failure."""
        start = time.monotonic()
        name = args[0] if args else ""
        try:
            proc = subprocess.run(["git", *args], cwd=self.repo_dir, capture_output=True)
        except OSError as exc:
            raise GitError(f"git {name}: {exc}") from exc
        elapsed = time.monotonic() - start
        out = _decode(proc.stdout).strip()
        if proc.returncode != 0:
            stderr = _decode(proc.stderr)
            self._log.debug("git %s failed (%.3fs): %s", list(args), elapsed, stderr or "<no output>")
            raise GitError(
                f"git {name}: exit status {proc.returncode}",
                stderr=stderr,
                exit_code=proc.returncode,
            )
        self._log.debug("git %s (%.3fs)", list(args), elapsed)
        return out

    def run(
        self,
        args: Sequence[str],
        env: Mapping[str, str] | None = None,
        exit_error: bool = False,
        interactive: bool = False,
        stdin: bytes | str | None = None,
    ) -> RunResult:
        """Run git with full control over I/O.

        With ``exit_error`` a non-zero exit raises GitError; otherwise the exit
        code is reported in the result. With ``interactive`` the command shares
        this process's terminal and captures nothing.
        """
        args = list(args)
        self._log.debug("git %s", args)
        full_env = {**os.environ, **env} if env else None
        if isinstance(stdin, str):
            stdin = stdin.encode("utf-8")
        capture = subprocess.DEVNULL if False else (None if interactive else subprocess.PIPE)
        try:
            proc = subprocess.run(
                ["git", *args],
                cwd=self.repo_dir,
                env=full_env,
                input=stdin,
                stdout=capture,
                stderr=capture,
            )
        except OSError as exc:
            raise GitError(f"git {args}: {exc}") from exc
        result = RunResult(proc.returncode, proc.stdout or b"", proc.stderr or b"")
        if exit_error and result.exit_code != 0:
            stderr = _decode(result.stderr)
            raise GitError(
                f"git {args} ({stderr.strip()}): exit status {result.exit_code}",
                stderr=stderr,
                exit_code=result.exit_code,
            )
        return result

    def read_git_file(self, name: str) -> str:
        """Read a file from the git directory."""
        return (self.git_dir / name).read_text(encoding="utf-8")

    def default_branch(self) -> str:
        """Return the default branch of the origin remote."""
        try:
            ref = self.git("symbolic-ref", "refs/remotes/origin/HEAD")
        except GitError as exc:
            self._log.debug("failed to determine remote HEAD: %s", exc)
            log.warning(
                "Failed to determine repository default branch. Ensure you have a "
                "remote named origin and try running `git remote set-head --auto origin` "
                "to fix this."
            )
            raise GitError("failed to determine remote HEAD", stderr=exc.stderr) from exc
        return ref.removeprefix("refs/remotes/origin/")

    def trunk_branches(self) -> list[str]:
        return [self.default_branch(), *self.additional_trunk_branches]

    def is_trunk_branch(self, name: str) -> bool:
        return name in self.trunk_branches()

    def is_current_branch_trunk(self) -> bool:
        return self.is_trunk_branch(self.current_branch_name())

    def current_branch_name(self) -> str:
        """Return the short name of the checked-out branch.

        Raises GitError in detached-HEAD state (e.g. during a rebase conflict).
        """
        try:
            return self.git("symbolic-ref", "--short", "HEAD")
        except GitError as exc:
            raise GitError(
                "failed to determine current branch "
                f"(are you in detached HEAD or is a rebase in progress?): {exc}",
                stderr=exc.stderr,
                exit_code=exc.exit_code,
            ) from exc

    def does_branch_exist(self, branch: str) -> bool:
        return self.does_ref_exist(f"refs/heads/{branch}")

    def does_remote_branch_exist(self, branch: str) -> bool:
        return self.does_ref_exist(f"refs/remotes/origin/{branch}")

    def does_ref_exist(self, ref: str) -> bool:
        try:
            result = self.run(["show-ref", ref])
        except GitError as exc:
            raise GitError(f"ref {ref} does not exist: {exc}") from exc
        return len(result.stdout) > 0

    def ls_remote(self, remote: str) -> dict[str, str]:
        """Map each ref name on the remote to its object id."""
        try:
            result = self.run(["ls-remote", remote], exit_error=True)
        except GitError as exc:
            raise GitError(f"failed to get remote branches: {exc}", stderr=exc.stderr) from exc
        refs: dict[str, str] = {}
        for line in result.lines():
            parts = line.split("\t")
            if len(parts) != 2:
                raise GitError(f"failed to parse the ls-remote output: {line!r}")
            oid, name = parts
            refs[name] = oid
        return refs

    def checkout_branch(
        self,
        name: str,
        new_branch: bool = False,
        new_head_ref: str | None = None,
    ) -> str | None:
        """Check out a branch and return the previously checked-out branch.

        Returns None when HEAD was detached before the checkout.
        """
        try:
            previous: str | None = self.current_branch_name()
        except GitError:
            self._log.debug("failed to get current branch name, repo is probably in detached HEAD")
            previous = None
        args = ["checkout"]
        if new_branch:
            args.append("-b")
        args.append(name)
        if new_branch and new_head_ref:
            args.append(new_head_ref)
        result = self.run(args)
        if result.exit_code != 0:
            stderr = _decode(result.stderr)
            self._log.debug("git checkout failed: stdout=%r stderr=%r", _decode(result.stdout), stderr)
            raise GitError(
                f"failed to checkout branch {name!r}: {stderr}",
                stderr=stderr,
                exit_code=result.exit_code,
            )
        return previous

    def detach(self) -> None:
        """Switch to a detached HEAD at the current commit."""
        result = self.run(["switch", "--detach"])
        if result.exit_code != 0:
            stderr = _decode(result.stderr)
            self._log.debug("git switch failed: stdout=%r stderr=%r", _decode(result.stdout), stderr)
            raise GitError(
                f"failed to switch to the detached HEAD: {stderr}",
                stderr=stderr,
                exit_code=result.exit_code,
            )

    def rev_parse(self, rev: str, symbolic_full_name: bool = False) -> str:
        args = ["rev-parse"]
        if symbolic_full_name:
            args.append("--symbolic-full-name")
        args.append(rev)
        return self.git(*args)

    def merge_base(self, *args: str) -> str:
        return self.git("merge-base", *args).strip()

    def branches_contain_committish(self, committish: str) -> list[BranchAndCommit]:
        """List local branches whose history contains the given commit."""
        out = self.git(
            "for-each-ref",
            "--contains",
            committish,
            "--format=%(objectname) %(refname:short)",
            "refs/heads",
        )
        found = []
        for line in out.strip().split("\n"):
            fields = line.split()
            if len(fields) == 2:
                found.append(BranchAndCommit(commit=fields[0], branch=fields[1]))
        return found

    def update_ref(
        self,
        ref: str,
        new: str,
        old: str | None = None,
        create_reflog: bool = False,
    ) -> None:
        """Point ``ref`` at ``new``; with ``old`` set, only if it currently equals it."""
        args = ["update-ref", ref, new]
        if old:
            args.append(old)
        if create_reflog:
            args.append("--create-reflog")
        try:
            self.git(*args)
        except GitError as exc:
            raise GitError(
                f"failed to write ref {ref!r} ({short_sha(new)}): {exc}",
                stderr=exc.stderr,
                exit_code=exc.exit_code,
            ) from exc

    def origin(self) -> Origin:
        """Return the URL and repository slug of the origin remote."""
        result = self.run(["remote", "get-url", "origin"])
        if result.exit_code != 0:
            stderr = _decode(result.stderr)
            if "No such remote" in stderr:
                raise RemoteNotFoundError()
            raise GitError("cannot get the remote of the repository", stderr=stderr)
        url = _decode(result.stdout).strip()
        if not url:
            raise GitError("origin URL is empty")
        try:
            parsed = parse_git_url(url)
        except ValueError as exc:
            raise GitError(f"failed to parse origin url {url!r}: {exc}") from exc
        slug = parsed.path.removesuffix(".git").removeprefix("/")
        return Origin(url=parsed, repo_slug=slug)

    def branch_delete(self, *args: str) -> None:
        """Force-delete the given branches."""
        self.run(["branch", "-D", *args], exit_error=True)

    def branch_set_config(self, name: str, key: str, value: str) -> None:
        """Set ``branch.<name>.<key>`` in the repository config."""
        self.run(["config", f"branch.{name}.{key}", value], exit_error=True)