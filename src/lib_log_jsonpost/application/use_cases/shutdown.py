"""Flush and shutdown orchestration for the JSON shipper.

Purpose
-------
Provide the drain-then-close sequence used when the host flushes or stops
logging, so no delivery still in flight is cut off by closing the client.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from concurrent.futures import Future

from lib_log_jsonpost.application.ports.poster import PosterPort

from .ship_event import Continuation, notify

logger = logging.getLogger(__name__)

FlushCallable = Callable[..., "Future[None]"]


def create_flush(*, poster: PosterPort) -> FlushCallable:
    """Return ``flush_async(continuation, timeout=None)``.

    The callable starts a drain and returns its future immediately; the
    continuation receives ``None`` once nothing is in flight, or the
    exception (typically :class:`TimeoutError`) that ended the drain.
    """

    def flush_async(continuation: Continuation | None = None, timeout: float | None = None) -> Future[None]:
        future = poster.drain(timeout)
        future.add_done_callback(lambda done: notify(continuation, done.exception()))
        return future

    return flush_async


def create_shutdown(*, poster: PosterPort, timeout: float | None = None) -> Callable[[], Awaitable[None]]:
    """Return an async callable performing the shutdown sequence."""

    async def shutdown() -> None:
        """Drain in-flight posts, then release the poster off the event loop."""
        try:
            await poster.flush(timeout)
        except TimeoutError:
            logger.warning("Closing JSON poster with %d posts still in flight", poster.active_posts)
        finally:
            await asyncio.to_thread(poster.close)

    return shutdown


__all__ = ["FlushCallable", "create_flush", "create_shutdown"]
