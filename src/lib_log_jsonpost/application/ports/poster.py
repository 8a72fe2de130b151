"""Port describing the fire-and-forget JSON poster."""

from __future__ import annotations

from concurrent.futures import Future
from typing import Protocol, runtime_checkable


@runtime_checkable
class PosterPort(Protocol):
    """Deliver JSON payloads without blocking and drain them on shutdown."""

    @property
    def active_posts(self) -> int:
        """Number of deliveries currently in flight."""

    def post(self, uri: str, json_payload: str) -> None:
        """Dispatch ``json_payload`` to ``uri`` and return immediately."""

    def drain(self, timeout: float | None = None) -> Future[None]:
        """Return a future resolved once no delivery is in flight."""

    async def flush(self, timeout: float | None = None) -> None:
        """Await :meth:`drain`."""

    def close(self) -> None:
        """Release the network resources."""


__all__ = ["PosterPort"]
