import subprocess
from pathlib import Path

import pytest

from avtool.git.repo import GitError, Repo
from avtool.git.show import CommitInfo, commit_info


def _git(cwd: Path, *args: str) -> str:
    proc = subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True)
    return proc.stdout.strip()


def _commit_file(cwd: Path, name: str, content: str, message: str) -> str:
    (cwd / name).write_text(content)
    _git(cwd, "add", name)
    _git(cwd, "commit", "-q", "-m", message)
    return _git(cwd, "rev-parse", "HEAD")


@pytest.fixture
def repo_dir(tmp_path: Path) -> Path:
    _git(tmp_path, "init", "-q")
    _git(tmp_path, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(tmp_path, "config", "user.name", "Test User")
    _git(tmp_path, "config", "user.email", "test@example.com")
    _git(tmp_path, "config", "commit.gpgsign", "false")
    _commit_file(tmp_path, "README.md", "# test\n", "Initial commit")
    return tmp_path


def test_commit_info(repo_dir):
    head = _commit_file(repo_dir, "file", "x\n", "the subject\n\nfirst body line\nsecond body line")
    info = commit_info(Repo(repo_dir), "HEAD")
    assert info.hash == head
    assert info.short_hash == head[:7]
    assert info.subject == "the subject"
    assert info.body.strip() == "first body line\nsecond body line"


def test_commit_info_without_body(repo_dir):
    info = commit_info(Repo(repo_dir), "HEAD")
    assert info.subject == "Initial commit"
    assert info.body.strip() == ""


def test_commit_info_unknown_revision(repo_dir):
    with pytest.raises(GitError):
        commit_info(Repo(repo_dir), "no-such-revision")


def test_body_with_prefix():
    info = CommitInfo(body="\nline a\nline b\n\n")
    assert info.body_with_prefix("> ") == ["> line a", "> line b"]


def test_body_with_prefix_empty_body():
    assert CommitInfo().body_with_prefix("# ") == ["# "]