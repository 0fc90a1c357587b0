import json
import os
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from avtool.version import fetch_latest_version


class _Handler(BaseHTTPRequestHandler):
    body = b""
    hits = 0

    def do_GET(self):
        type(self).hits += 1
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(self.body)))
        self.end_headers()
        self.wfile.write(self.body)

    def log_message(self, *args):
        pass


@pytest.fixture
def server():
    handler = type("Handler", (_Handler,), {"body": json.dumps({"name": "v1.2.3"}).encode(), "hits": 0})
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{httpd.server_address[1]}/releases/latest", handler
    finally:
        httpd.shutdown()
        httpd.server_close()


def test_fresh_cache_is_used_without_network(tmp_path):
    (tmp_path / "version-check").write_text("v9.9.9")
    assert fetch_latest_version(tmp_path) == "v9.9.9"


def test_fetches_and_caches(tmp_path, server):
    url, handler = server
    assert fetch_latest_version(tmp_path, url) == "v1.2.3"
    assert (tmp_path / "version-check").read_text() == "v1.2.3"
    assert fetch_latest_version(tmp_path, url) == "v1.2.3"
    assert handler.hits == 1


def test_stale_cache_is_refreshed(tmp_path, server):
    url, handler = server
    cache = tmp_path / "version-check"
    cache.write_text("old")
    old = time.time() - 2 * 24 * 60 * 60
    os.utime(cache, (old, old))
    assert fetch_latest_version(tmp_path, url) == "v1.2.3"
    assert handler.hits == 1


def test_missing_url_without_cache_raises(tmp_path):
    with pytest.raises(ValueError):
        fetch_latest_version(tmp_path)


def test_cache_dir_is_created(tmp_path, server):
    url, _ = server
    target = tmp_path / "nested" / "cache"
    assert fetch_latest_version(target, url) == "v1.2.3"
    assert (target / "version-check").is_file()