"""Runtime façade wiring the JSON shipper for host applications.

Purpose
-------
Expose a stable entry point (``init``, ``write``, ``flush``, ``flush_async``,
``shutdown``) so hosts and logging-framework integrations never import the
inner layers directly.

Contents
--------
* ``init`` - composition root installing the active runtime.
* ``write`` - synchronous, never-raising dispatch of one event.
* ``flush`` / ``flush_async`` - drain deliveries still in flight.
* ``shutdown`` / ``shutdown_async`` - drain, release the HTTP client, clear state.
* ``inspect_runtime`` - read-only snapshot for diagnostics.

System Role
-----------
Outer shell of the package: configuration enters here, adapters are chosen in
:mod:`._composition`, and the use cases stay unaware of both.
"""

from __future__ import annotations

import asyncio
from concurrent.futures import Future
from dataclasses import dataclass

import httpx

from lib_log_jsonpost.application.use_cases.ship_event import Continuation
from lib_log_jsonpost.domain.events import LogEvent
from lib_log_jsonpost.domain.policy import FailurePolicy

from ._composition import build_runtime
from ._settings import JsonPostConfig, RuntimeSettings, build_runtime_settings
from ._state import JsonPostRuntime, clear_runtime, current_runtime, is_initialised, set_runtime


@dataclass(frozen=True)
class RuntimeSnapshot:
    """Immutable view over the active shipping runtime."""

    url: str
    fields: tuple[str, ...]
    throw_on_failure: bool
    failure_policy: FailurePolicy
    max_concurrency: int | None
    active_posts: int


__all__ = [
    "JsonPostConfig",
    "JsonPostRuntime",
    "RuntimeSettings",
    "RuntimeSnapshot",
    "flush",
    "flush_async",
    "init",
    "inspect_runtime",
    "is_initialised",
    "shutdown",
    "shutdown_async",
    "write",
]


def init(config: JsonPostConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
    """Compose the shipping runtime according to ``config``.

    Inputs
    ------
    config:
        :class:`JsonPostConfig`; ``LOG_JSONPOST_*`` environment variables
        override its values.
    transport:
        Optional ``httpx`` transport replacing the network (tests).

    Side Effects
    ------------
    Raises :class:`RuntimeError` if a runtime is already active. Starts the
    poster's delivery thread.
    """

    if is_initialised():
        raise RuntimeError(
            "lib_log_jsonpost.init() cannot be called twice without shutdown(); call lib_log_jsonpost.shutdown() first",
        )
    settings = build_runtime_settings(config)
    set_runtime(build_runtime(settings, transport=transport))


def write(event: LogEvent, continuation: Continuation | None = None) -> None:
    """Ship ``event`` without blocking on the network.

    ``continuation`` receives ``None`` once the post was dispatched, or the
    synchronous exception (e.g. :class:`ConfigurationError`) that prevented
    it. Delivery outcomes are reported by the poster's failure policy.
    """

    current_runtime().write(event, continuation)


def flush_async(continuation: Continuation | None = None, timeout: float | None = None) -> Future[None]:
    """Start draining in-flight posts; report through ``continuation``."""

    return current_runtime().flush_async(continuation, timeout)


def flush(timeout: float | None = None) -> None:
    """Block until no post is in flight.

    Raises
    ------
    TimeoutError
        When ``timeout`` elapses first.
    """

    current_runtime().poster.drain(timeout).result()


def inspect_runtime() -> RuntimeSnapshot:
    """Return a read-only snapshot of the current runtime state."""

    runtime = current_runtime()
    settings = runtime.settings
    return RuntimeSnapshot(
        url=settings.url,
        fields=tuple(spec.name for spec in settings.fields),
        throw_on_failure=settings.throw_on_failure,
        failure_policy=settings.failure_policy,
        max_concurrency=settings.max_concurrency,
        active_posts=runtime.poster.active_posts,
    )


def shutdown() -> None:
    """Drain posts, release the poster, and clear runtime state synchronously.

    Raises :class:`RuntimeError` when invoked inside a running event loop to
    steer callers to :func:`shutdown_async`.
    """

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        raise RuntimeError(
            "lib_log_jsonpost.shutdown() cannot run inside an active event loop; await lib_log_jsonpost.shutdown_async() instead",
        )
    asyncio.run(shutdown_async())


async def shutdown_async() -> None:
    """Drain posts, release the poster, and clear runtime state asynchronously."""

    runtime = current_runtime()
    try:
        await runtime.shutdown_async()
    finally:
        clear_runtime()
