"""Thread-safe counter of deliveries that are still in flight."""

from __future__ import annotations

import threading


class InFlightCounter:
    """Non-negative scalar shared by concurrent posts and the drain loop.

    Examples
    --------
    >>> counter = InFlightCounter()
    >>> counter.increment()
    1
    >>> counter.decrement()
    0
    >>> counter.snapshot()
    0
    """

    __slots__ = ("_lock", "_value")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def increment(self) -> int:
        """Add one in-flight delivery and return the new count."""
        with self._lock:
            self._value += 1
            return self._value

    def decrement(self) -> int:
        """Remove one in-flight delivery and return the new count.

        Raises
        ------
        RuntimeError
            When the counter is already zero.
        """
        with self._lock:
            if self._value == 0:
                raise RuntimeError("in-flight counter cannot go negative")
            self._value -= 1
            return self._value

    def snapshot(self) -> int:
        with self._lock:
            return self._value

    def __repr__(self) -> str:
        return f"InFlightCounter({self.snapshot()})"


__all__ = ["InFlightCounter"]
