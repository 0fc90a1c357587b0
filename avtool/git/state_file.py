"""JSON state files kept in the repository's tool directory."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any

from avtool.git.repo import Repo


class StateFileKind(str, Enum):
    """The state files, named by their file names."""

    SYNC = "stack-sync.state.json"
    REORDER = "stack-reorder.state.json"
    RESTACK = "stack-restack.state.json"
    SYNC_V2 = "stack-sync-v2.state.json"

    def __str__(self) -> str:
        return self.value


def _state_path(repo: Repo, kind: StateFileKind | str) -> Path:
    return Path(repo.av_dir) / StateFileKind(kind).value


def read_state_file(repo: Repo, kind: StateFileKind | str) -> Any:
    """Load a state file; raises FileNotFoundError if it does not exist."""
    return json.loads(_state_path(repo, kind).read_text(encoding="utf-8"))


def write_state_file(repo: Repo, kind: StateFileKind | str, data: Any) -> None:
    """Save ``data`` to a state file, or delete the file when ``data`` is None."""
    path = _state_path(repo, kind)
    if data is None:
        path.unlink(missing_ok=True)
        return
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")