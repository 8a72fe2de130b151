"""Fire-and-forget JSON poster backed by ``httpx``.

Purpose
-------
Deliver JSON documents to HTTP endpoints without blocking the thread that
produces log events, while keeping an exact count of deliveries in flight so
shutdown can drain them.

Contents
--------
* :class:`HttpJsonPoster` - concrete :class:`PosterPort` implementation.

System Role
-----------
Each :meth:`HttpJsonPoster.post` increments the shared
:class:`InFlightCounter` on the caller's thread and schedules one asyncio task
on a private event loop running in a daemon thread. The task performs the
request and decrements the counter in its ``finally`` block, so every exit
path (success, non-2xx, transport error, timeout, cancellation) balances the
increment. :meth:`HttpJsonPoster.drain` polls the counter on its own thread
and reports through a :class:`concurrent.futures.Future`.

Alignment Notes
---------------
Connections are never reused: every request carries ``Connection: close`` and
the pool keeps no idle connections. Deliveries are unordered, never retried,
and never raise into the caller of :meth:`post`.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Callable, Mapping
from concurrent.futures import Future
from typing import Any

import httpx

from lib_log_jsonpost.application.ports.poster import PosterPort
from lib_log_jsonpost.domain.counter import InFlightCounter
from lib_log_jsonpost.domain.errors import CancellationError, DeliveryError, DisposalError
from lib_log_jsonpost.domain.policy import FailurePolicy

LOGGER = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=utf-8"

_DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Connection": "close",
}

DiagnosticHook = Callable[[str, dict[str, Any]], None] | None


class HttpJsonPoster(PosterPort):
    """POST JSON payloads asynchronously and track in-flight deliveries.

    Examples
    --------
    >>> transport = httpx.MockTransport(lambda request: httpx.Response(204))
    >>> poster = HttpJsonPoster(transport=transport)
    >>> poster.post("http://logs.invalid/ingest", '{"message":"ready"}')
    >>> poster.drain(timeout=5).result()
    >>> poster.active_posts
    0
    >>> poster.close()
    """

    def __init__(
        self,
        *,
        throw_on_failure: bool = False,
        timeout: float | None = 30.0,
        headers: Mapping[str, str] | None = None,
        counter: InFlightCounter | None = None,
        failure_policy: FailurePolicy | str = FailurePolicy.LOG,
        on_failure: Callable[[DeliveryError], None] | None = None,
        max_concurrency: int | None = None,
        poll_interval: float = 0.001,
        close_timeout: float | None = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
        diagnostic: DiagnosticHook = None,
    ) -> None:
        """Create the HTTP client and start the delivery loop thread.

        Parameters
        ----------
        throw_on_failure:
            Treat non-2xx responses as :class:`DeliveryError`. When ``False``
            only transport failures and timeouts are reported.
        timeout:
            Per-request timeout in seconds (``None`` disables it).
        headers:
            Extra default headers sent with every request.
        counter:
            Shared :class:`InFlightCounter`; a private one is created when
            omitted.
        failure_policy:
            Where delivery errors go: ``log`` (warning), ``drop``, or
            ``callback`` (requires ``on_failure``).
        on_failure:
            Receives every :class:`DeliveryError` under the ``callback`` policy.
        max_concurrency:
            Optional bound on simultaneous requests. :meth:`post` never waits
            for a slot; tasks queue on the loop instead.
        poll_interval:
            Seconds between counter checks while draining.
        close_timeout:
            Upper bound for :meth:`close` to cancel deliveries and release the
            client.
        transport:
            Custom ``httpx`` transport (tests use :class:`httpx.MockTransport`).
        diagnostic:
            Optional hook receiving ``(name, payload)`` for delivery milestones.
        """
        policy = FailurePolicy.from_name(failure_policy)
        if policy is FailurePolicy.CALLBACK and on_failure is None:
            raise ValueError("failure_policy 'callback' requires an on_failure callable")
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be positive")
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")

        self._throw_on_failure = throw_on_failure
        self._counter = counter if counter is not None else InFlightCounter()
        self._failure_policy = policy
        self._on_failure = on_failure
        self._poll_interval = poll_interval
        self._close_timeout = close_timeout
        self._diagnostic = diagnostic
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency is not None else None

        default_headers = dict(_DEFAULT_HEADERS)
        if headers:
            default_headers.update(headers)
        self._client = httpx.AsyncClient(
            headers=default_headers,
            timeout=timeout,
            transport=transport,
            limits=httpx.Limits(max_keepalive_connections=0),
        )

        self._lock = threading.Lock()
        self._closed = False
        self._tasks: set[asyncio.Task[None]] = set()
        self._closing_task: asyncio.Task[None] | None = None
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, name="lib_log_jsonpost-poster", daemon=True)
        self._thread.start()

    @property
    def active_posts(self) -> int:
        """Return the number of deliveries currently in flight."""
        return self._counter.snapshot()

    @property
    def throw_on_failure(self) -> bool:
        return self._throw_on_failure

    @property
    def closed(self) -> bool:
        return self._closed

    def add_header(self, name: str, value: str) -> "HttpJsonPoster":
        """Add a default header to every subsequent request."""
        self._client.headers[name] = value
        return self

    def post(self, uri: str, json_payload: str) -> None:
        """Dispatch ``json_payload`` to ``uri`` and return immediately.

        Raises
        ------
        RuntimeError
            When the poster has been closed. Nothing is counted in that case.
        """
        target = str(uri)
        with self._lock:
            if self._closed:
                raise RuntimeError("HttpJsonPoster is closed")
            posts = self._counter.increment()
            self._loop.call_soon_threadsafe(self._spawn, target, json_payload)
        LOGGER.debug("JsonPoster posting (%d)...", posts)
        self._emit_diagnostic("post_dispatched", {"uri": target, "active_posts": posts})

    def drain(self, timeout: float | None = None) -> Future[None]:
        """Return a future resolved once no delivery is in flight.

        The counter is polled on a dedicated daemon thread every
        ``poll_interval`` seconds, so the caller's thread never blocks unless
        it chooses to wait on the future. With ``timeout`` the future fails
        with :class:`TimeoutError` once the deadline passes.
        """
        future: Future[None] = Future()
        future.set_running_or_notify_cancel()
        thread = threading.Thread(
            target=self._poll_until_idle,
            args=(future, timeout),
            name="lib_log_jsonpost-drain",
            daemon=True,
        )
        thread.start()
        return future

    async def flush(self, timeout: float | None = None) -> None:
        """Await :meth:`drain` from asynchronous shutdown code."""
        await asyncio.wrap_future(self.drain(timeout))

    def close(self) -> None:
        """Cancel remaining deliveries, close the client, and stop the loop.

        Idempotent. Teardown failures are logged at DEBUG and swallowed; call
        :meth:`drain` first to avoid cancelling deliveries still in flight.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
        LOGGER.debug("Disposing..")
        if threading.current_thread() is self._thread:
            # Running on the loop itself: schedule the teardown instead of waiting for it.
            self._closing_task = self._loop.create_task(self._shutdown_and_stop())
            return
        try:
            asyncio.run_coroutine_threadsafe(self._shutdown(), self._loop).result(self._close_timeout)
        except Exception as exc:  # noqa: BLE001
            self._report_disposal_failure(exc)
        finally:
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(self._close_timeout)
            if self._thread.is_alive():
                self._report_disposal_failure(RuntimeError("poster loop thread did not stop"))

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_forever()
        finally:
            self._loop.close()

    def _spawn(self, uri: str, json_payload: str) -> None:
        task = self._loop.create_task(self._deliver(uri, json_payload))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _deliver(self, uri: str, json_payload: str) -> None:
        try:
            if self._semaphore is None:
                await self._send(uri, json_payload)
            else:
                async with self._semaphore:
                    await self._send(uri, json_payload)
        except asyncio.CancelledError:
            self._report_cancelled(CancellationError(uri))
        except DeliveryError as exc:
            self._report_failure(exc)
        except httpx.TimeoutException as exc:
            self._report_failure(DeliveryError(uri, f"Delivery to {uri} timed out: {exc!r}"))
        except Exception as exc:  # noqa: BLE001
            self._report_failure(DeliveryError(uri, f"Delivery to {uri} failed: {exc!r}"))
        finally:
            posts = self._counter.decrement()
            LOGGER.debug("JsonPoster completed (%d)...", posts)

    async def _send(self, uri: str, json_payload: str) -> None:
        response = await self._client.post(
            uri,
            content=json_payload.encode("utf-8"),
            headers={"Content-Type": JSON_CONTENT_TYPE},
        )
        if self._throw_on_failure and not response.is_success:
            raise DeliveryError(
                uri,
                f"Delivery to {uri} returned HTTP {response.status_code} {response.reason_phrase}".rstrip(),
                status_code=response.status_code,
            )
        self._emit_diagnostic("post_completed", {"uri": uri, "status_code": response.status_code})

    async def _shutdown(self) -> None:
        # Let tasks spawned ahead of this coroutine enter their try blocks.
        await asyncio.sleep(0)
        pending = [task for task in self._tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        await self._client.aclose()

    async def _shutdown_and_stop(self) -> None:
        try:
            await self._shutdown()
        except Exception as exc:  # noqa: BLE001
            self._report_disposal_failure(exc)
        finally:
            self._loop.stop()

    def _poll_until_idle(self, future: Future[None], timeout: float | None) -> None:
        deadline = time.monotonic() + timeout if timeout is not None else None
        active = self._counter.snapshot()
        if active:
            LOGGER.debug("JsonPoster waiting for %d posts to complete", active)
        while active:
            if deadline is not None and time.monotonic() >= deadline:
                self._emit_diagnostic("drain_timeout", {"active_posts": active, "timeout": timeout})
                future.set_exception(TimeoutError(f"{active} posts still in flight after {timeout}s"))
                return
            time.sleep(self._poll_interval)
            active = self._counter.snapshot()
        future.set_result(None)

    def _report_failure(self, error: DeliveryError) -> None:
        self._emit_diagnostic(
            "post_failed",
            {"uri": error.uri, "status_code": error.status_code, "exception": repr(error)},
        )
        if self._failure_policy is FailurePolicy.LOG:
            LOGGER.warning("JsonPoster delivery failed: %s", error)
        elif self._failure_policy is FailurePolicy.CALLBACK and self._on_failure is not None:
            try:
                self._on_failure(error)
            except Exception as exc:  # noqa: BLE001
                LOGGER.error("JsonPoster failure callback raised; continuing", exc_info=exc)

    def _report_cancelled(self, error: CancellationError) -> None:
        LOGGER.debug("%s", error)
        self._emit_diagnostic("post_cancelled", {"uri": error.uri})

    def _report_disposal_failure(self, exc: BaseException) -> None:
        error = DisposalError(f"Exception disposing of HttpJsonPoster: {exc!r}")
        LOGGER.debug("%s", error, exc_info=exc)
        self._emit_diagnostic("dispose_failed", {"exception": repr(exc)})

    def _emit_diagnostic(self, name: str, payload: dict[str, Any]) -> None:
        """Invoke the diagnostic hook while guarding against callback failures."""

        if self._diagnostic is None:
            return
        try:
            self._diagnostic(name, payload)
        except Exception as diagnostic_exc:  # noqa: BLE001
            LOGGER.error("Poster diagnostic hook raised while reporting %s", name, exc_info=diagnostic_exc)


__all__ = ["HttpJsonPoster", "JSON_CONTENT_TYPE"]
