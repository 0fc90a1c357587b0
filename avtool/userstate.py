"""Per-user state kept under the XDG state directory."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

_APP_DIR = "av"
_FILE_NAME = "user-state.json"


@dataclass
class UserState:
    """State remembered for the user across runs."""

    notified_stack_sync_change: bool = False

    def to_json(self) -> str:
        return json.dumps({"NotifiedStackSyncChange": self.notified_stack_sync_change})


def _default_state_home() -> Path:
    env = os.environ.get("XDG_STATE_HOME")
    if env and os.path.isabs(env):
        return Path(env)
    return Path.home() / ".local" / "state"


def state_file_path(state_home: str | os.PathLike[str] | None = None) -> Path:
    """Return the path of the user state file."""
    base = Path(state_home) if state_home is not None else _default_state_home()
    return base / _APP_DIR / _FILE_NAME


def load_user_state(state_home: str | os.PathLike[str] | None = None) -> UserState:
    """Load the user state; a missing file yields the defaults.

    Raises ValueError when the file holds invalid JSON.
    """
    path = state_file_path(state_home)
    if not path.is_file():
        return UserState()
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"invalid user state in {path}: expected a JSON object")
    return UserState(notified_stack_sync_change=bool(data.get("NotifiedStackSyncChange", False)))


def save_user_state(
    state: UserState, state_home: str | os.PathLike[str] | None = None
) -> Path:
    """Write the user state and return the file it was written to."""
    path = state_file_path(state_home)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(state.to_json(), encoding="utf-8")
    return path