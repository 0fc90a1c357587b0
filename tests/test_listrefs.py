import subprocess
from pathlib import Path

import pytest

from avtool.git.listrefs import list_refs
from avtool.git.repo import Repo


def _git(cwd: Path, *args: str) -> str:
    proc = subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True)
    return proc.stdout.strip()


@pytest.fixture
def repo_dir(tmp_path: Path) -> Path:
    _git(tmp_path, "init", "-q")
    _git(tmp_path, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(tmp_path, "config", "user.name", "Test User")
    _git(tmp_path, "config", "user.email", "test@example.com")
    _git(tmp_path, "config", "commit.gpgsign", "false")
    (tmp_path / "README.md").write_text("# test\n")
    _git(tmp_path, "add", "README.md")
    _git(tmp_path, "commit", "-q", "-m", "Initial commit")
    return tmp_path


def test_list_refs(repo_dir):
    refs = list_refs(Repo(repo_dir), patterns=["refs/heads/*"])
    assert len(refs) == 1

    main = refs[0]
    assert main.name == "refs/heads/main"
    assert main.type == "commit"
    assert main.oid == _git(repo_dir, "rev-parse", "main")
    assert main.upstream == ""
    assert main.upstream_status == ""


def test_list_refs_includes_tags_without_pattern(repo_dir):
    _git(repo_dir, "tag", "-a", "v1", "-m", "release")
    names = {ref.name: ref for ref in list_refs(Repo(repo_dir))}
    assert set(names) == {"refs/heads/main", "refs/tags/v1"}
    assert names["refs/tags/v1"].type == "tag"


def test_list_refs_no_match(repo_dir):
    assert list_refs(Repo(repo_dir), patterns=["refs/heads/nothing-here"]) == []