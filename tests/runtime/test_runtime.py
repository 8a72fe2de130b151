from __future__ import annotations

import asyncio
import json
import threading
from typing import Any

import httpx
import pytest

from lib_log_jsonpost import runtime
from lib_log_jsonpost.domain.errors import ConfigurationError
from lib_log_jsonpost.domain.policy import FailurePolicy
from lib_log_jsonpost.runtime import JsonPostConfig


class RecordingTransport(httpx.MockTransport):
    """Mock transport remembering every request; optionally gated."""

    def __init__(self, status: int = 200, gate: threading.Event | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.gate = gate
        self.status = status
        super().__init__(self._handle)

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        while self.gate is not None and not self.gate.is_set():
            await asyncio.sleep(0.005)
        return httpx.Response(self.status)


def _config(**overrides: Any) -> JsonPostConfig:
    values: dict[str, Any] = {
        "url": "http://logs.invalid/{LoggerName}",
        "fields": ("message", "level", "loggername", "user"),
    }
    values.update(overrides)
    return JsonPostConfig(**values)


def test_write_then_flush_delivers_the_document(sample_event) -> None:
    transport = RecordingTransport()
    outcomes: list[BaseException | None] = []
    runtime.init(_config(), transport=transport)

    runtime.write(sample_event, outcomes.append)
    runtime.flush(timeout=5)

    assert outcomes == [None]
    assert len(transport.requests) == 1
    request = transport.requests[0]
    assert str(request.url) == "http://logs.invalid/tests"
    assert json.loads(request.content) == {"message": "ready", "level": "INFO", "loggername": "tests", "user": "ann"}
    runtime.shutdown()
    assert runtime.is_initialised() is False


def test_unresolvable_field_reaches_the_continuation(make_event) -> None:
    transport = RecordingTransport()
    outcomes: list[BaseException | None] = []
    runtime.init(_config(), transport=transport)

    runtime.write(make_event(), outcomes.append)
    runtime.flush(timeout=5)

    assert len(outcomes) == 1
    assert isinstance(outcomes[0], ConfigurationError)
    assert transport.requests == []
    assert runtime.inspect_runtime().active_posts == 0


def test_invalid_rendered_destination_reaches_the_continuation(make_event) -> None:
    transport = RecordingTransport()
    outcomes: list[BaseException | None] = []
    runtime.init(_config(url="{LoggerName}"), transport=transport)

    runtime.write(make_event(properties={"user": "ann"}), outcomes.append)

    assert isinstance(outcomes[0], ValueError)
    assert "Invalid destination URI" in str(outcomes[0])
    assert transport.requests == []


def test_inspect_runtime_reports_configuration() -> None:
    runtime.init(
        _config(max_concurrency=4, throw_exceptions_on_failed_post=True, failure_policy="drop"),
        transport=RecordingTransport(),
    )

    snapshot = runtime.inspect_runtime()

    assert snapshot.url == "http://logs.invalid/{LoggerName}"
    assert snapshot.fields == ("message", "level", "loggername", "user")
    assert snapshot.throw_on_failure is True
    assert snapshot.failure_policy is FailurePolicy.DROP
    assert snapshot.max_concurrency == 4
    assert snapshot.active_posts == 0


def test_init_twice_is_rejected() -> None:
    runtime.init(_config(), transport=RecordingTransport())

    with pytest.raises(RuntimeError, match="cannot be called twice"):
        runtime.init(_config(), transport=RecordingTransport())


def test_write_before_init_is_rejected(make_event) -> None:
    with pytest.raises(RuntimeError, match="must be called before"):
        runtime.write(make_event())


def test_flush_times_out_while_posts_are_stuck(sample_event) -> None:
    gate = threading.Event()
    runtime.init(_config(), transport=RecordingTransport(gate=gate))
    runtime.write(sample_event)

    with pytest.raises(TimeoutError):
        runtime.flush(timeout=0.05)

    gate.set()
    runtime.flush(timeout=5)
    assert runtime.inspect_runtime().active_posts == 0


def test_flush_async_notifies_the_continuation(sample_event) -> None:
    runtime.init(_config(), transport=RecordingTransport())
    runtime.write(sample_event)
    done = threading.Event()
    outcomes: list[BaseException | None] = []

    def continuation(error: BaseException | None) -> None:
        outcomes.append(error)
        done.set()

    future = runtime.flush_async(continuation, timeout=5)

    assert done.wait(timeout=10)
    assert future.result() is None
    assert outcomes == [None]


def test_shutdown_abandons_stuck_posts_after_the_deadline(sample_event, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level("WARNING", logger="lib_log_jsonpost.application.use_cases.shutdown")
    gate = threading.Event()
    runtime.init(_config(shutdown_timeout=0.05), transport=RecordingTransport(gate=gate))
    runtime.write(sample_event)

    runtime.shutdown()

    assert "1 posts still in flight" in caplog.text
    assert runtime.is_initialised() is False


def test_shutdown_inside_running_loop_is_rejected() -> None:
    runtime.init(_config(), transport=RecordingTransport())

    async def attempt() -> None:
        with pytest.raises(RuntimeError, match="shutdown_async"):
            runtime.shutdown()
        await runtime.shutdown_async()

    asyncio.run(attempt())

    assert runtime.is_initialised() is False


def test_delivery_failures_use_the_configured_policy(sample_event) -> None:
    failures: list[BaseException] = []
    runtime.init(
        _config(throw_exceptions_on_failed_post=True, failure_policy="callback", on_failure=failures.append),
        transport=RecordingTransport(status=500),
    )

    runtime.write(sample_event)
    runtime.flush(timeout=5)

    assert len(failures) == 1
    assert getattr(failures[0], "status_code", None) == 500


def test_headers_from_config_are_sent(sample_event) -> None:
    transport = RecordingTransport()
    runtime.init(_config(headers={"X-Api-Key": "secret"}), transport=transport)

    runtime.write(sample_event)
    runtime.flush(timeout=5)

    assert transport.requests[0].headers["x-api-key"] == "secret"
