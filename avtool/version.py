"""The application version and a cached lookup of the latest release."""

from __future__ import annotations

import json
import os
import time
import urllib.error
import urllib.request
from pathlib import Path

VERSION_DEV = "<dev>"

#: The version of this application; release builds set a real value.
VERSION = VERSION_DEV

DEFAULT_TIMEOUT = 5.0

# A cached answer is reused for this many seconds.
_CACHE_TTL = 24 * 60 * 60
_CACHE_FILE = "version-check"


def _default_cache_dir() -> Path:
    return Path.home() / ".cache" / "av"


def fetch_latest_version(
    cache_dir: str | os.PathLike[str] | None = None,
    url: str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Return the name of the latest release.

    An answer younger than a day is read from the cache in ``cache_dir``;
    otherwise ``url`` (a releases endpoint returning JSON with a ``name``
    field) is queried and the answer cached. Raises OSError on network or
    file errors and ValueError on a malformed response or a missing URL.
    """
    directory = Path(cache_dir) if cache_dir is not None else _default_cache_dir()
    directory.mkdir(parents=True, exist_ok=True)
    cache_file = directory / _CACHE_FILE

    try:
        mtime = cache_file.stat().st_mtime
    except OSError:
        mtime = None
    if mtime is not None and time.time() - mtime <= _CACHE_TTL:
        return cache_file.read_text(encoding="utf-8")

    if not url:
        raise ValueError("no release URL given to check the latest version")

    request = urllib.request.Request(url, method="GET")
    with urllib.request.urlopen(request, timeout=timeout) as response:
        body = response.read()
    data = json.loads(body)
    if not isinstance(data, dict):
        raise ValueError("unexpected release response: not a JSON object")
    name = data.get("name") or ""
    if not isinstance(name, str):
        raise ValueError("unexpected release response: name is not a string")

    cache_file.write_text(name, encoding="utf-8")
    return name