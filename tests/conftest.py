from __future__ import annotations

import json
import os
import threading
from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

import pytest

from lib_log_jsonpost.domain.events import LogEvent
from lib_log_jsonpost.domain.levels import LogLevel
from lib_log_jsonpost.runtime import _state as runtime_state

EventFactory = Callable[..., LogEvent]


@pytest.fixture
def make_event() -> EventFactory:
    def factory(**overrides: Any) -> LogEvent:
        values: dict[str, Any] = {
            "level": LogLevel.INFO,
            "message": "ready",
            "timestamp": datetime(2025, 9, 23, 12, 0, tzinfo=timezone.utc),
            "logger_name": "tests",
            "sequence_id": 7,
        }
        values.update(overrides)
        return LogEvent(**values)

    return factory


@pytest.fixture
def sample_event(make_event: EventFactory) -> LogEvent:
    return make_event(properties={"user": "ann", 42: "answer"})


@pytest.fixture(autouse=True)
def _clear_jsonpost_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("LOG_JSONPOST_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_runtime_state() -> Iterator[None]:
    yield
    if runtime_state.is_initialised():
        runtime = runtime_state.current_runtime()
        runtime.poster.close()
        runtime_state.clear_runtime()


class RecordingServer:
    """Loopback HTTP server recording every POST it receives."""

    def __init__(self, status: int = 200) -> None:
        self.status = status
        self.requests: list[dict[str, Any]] = []
        self.received = threading.Event()
        self.release = threading.Event()
        self.release.set()
        server = self

        class Handler(BaseHTTPRequestHandler):
            def do_POST(self) -> None:  # noqa: N802
                length = int(self.headers.get("Content-Length", "0"))
                body = self.rfile.read(length)
                server.requests.append(
                    {
                        "path": self.path,
                        "headers": {key.lower(): value for key, value in self.headers.items()},
                        "body": json.loads(body.decode("utf-8")),
                    }
                )
                server.received.set()
                server.release.wait(timeout=5)
                self.send_response(server.status)
                self.send_header("Content-Length", "0")
                self.end_headers()

            def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
                return None

        self._httpd = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
        self._httpd.daemon_threads = True
        self.url = f"http://127.0.0.1:{self._httpd.server_address[1]}"
        self._thread = threading.Thread(target=self._httpd.serve_forever, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def close(self) -> None:
        self.release.set()
        self._httpd.shutdown()
        self._httpd.server_close()
        self._thread.join(timeout=1)


@pytest.fixture
def http_server() -> Iterator[RecordingServer]:
    server = RecordingServer()
    server.start()
    try:
        yield server
    finally:
        server.close()
