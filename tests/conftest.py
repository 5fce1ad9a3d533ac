"""Shared fixtures: settings and a local mock ingest endpoint."""

import json
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from cricket_collector.config import Settings


class IngestServer:
    """Records every request and answers with queued status codes."""

    def __init__(self):
        self.requests = []
        self.statuses = []
        self.default_status = 201
        self._lock = threading.Lock()
        self.started_at = time.monotonic()

        server = self

        class Handler(BaseHTTPRequestHandler):
            def do_POST(self):
                length = int(self.headers.get("Content-Length", 0))
                body = self.rfile.read(length)
                with server._lock:
                    server.requests.append({
                        "path": self.path,
                        "headers": dict(self.headers),
                        "json": json.loads(body),
                        "received_at": time.monotonic(),
                    })
                    status = server.statuses.pop(0) if server.statuses else server.default_status
                reply = b'{"ok": true}' if status == 201 else b'{"error": "boom"}'
                self.send_response(status)
                self.send_header("Content-Type", "application/json")
                self.send_header("Content-Length", str(len(reply)))
                self.end_headers()
                self.wfile.write(reply)

            def log_message(self, format, *args):
                pass

        self.httpd = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
        self.thread = threading.Thread(target=self.httpd.serve_forever, daemon=True)

    @property
    def url(self) -> str:
        host, port = self.httpd.server_address[:2]
        return f"http://{host}:{port}"

    def __enter__(self):
        self.thread.start()
        return self

    def __exit__(self, *exc):
        self.httpd.shutdown()
        self.httpd.server_close()


@pytest.fixture
def ingest_server():
    with IngestServer() as server:
        yield server


@pytest.fixture
def settings():
    return Settings(
        api_base_url="http://collector.test",
        api_key="secret-key",
        server_name="web-01",
        collect_interval=60,
        debug=True,
    )


@pytest.fixture(autouse=True)
def no_proxy(monkeypatch):
    """Requests to the local mock endpoint must not go through a proxy."""
    for key in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
