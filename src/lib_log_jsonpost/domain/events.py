"""Domain event describing a structured log record.

Purpose
-------
Provide an immutable representation of the log events the shipper turns into
JSON documents.

Contents
--------
* :class:`LogEvent` dataclass exposing the well-known attributes plus an open
  ``properties`` mapping.
* :data:`PUBLIC_ATTRIBUTES` - statically declared accessor table used as the
  last lookup tier by the document builder.
* :func:`next_sequence_id` - process-wide sequence numbers.

System Role
-----------
Sits in the domain layer; the document builder and template layouts only read
events through the attributes and accessors declared here.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import datetime, timezone
from operator import attrgetter
from types import MappingProxyType
from typing import Any, Callable, Mapping

from .levels import LogLevel

_SEQUENCE = itertools.count(1)


def next_sequence_id() -> int:
    """Return the next process-wide sequence number (starting at 1)."""

    return next(_SEQUENCE)


def _ensure_aware(ts: datetime) -> datetime:
    """Validate that ``ts`` is timezone-aware and normalise to UTC."""
    if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
        raise ValueError("timestamp must be timezone-aware")
    return ts.astimezone(timezone.utc)


@dataclass(slots=True, frozen=True)
class LogEvent:
    """Immutable log record handed to the shipper.

    Attributes
    ----------
    level:
        :class:`LogLevel` severity.
    message:
        Message template as passed by the caller.
    timestamp:
        Time of the event in timezone-aware UTC.
    logger_name:
        Logical logger emitting the event.
    exception:
        Exception attached to the record, if any.
    stack_trace:
        Formatted stack captured at emission time, if any.
    sequence_id:
        Monotonic id assigned by the producer (see :func:`next_sequence_id`).
    user_stack_frame, user_stack_frame_number:
        Description and depth of the first caller frame outside the logging
        machinery.
    parameters:
        Positional arguments interpolated into ``message``.
    properties:
        Open key/value bag. Keys are not required to be strings.
    """

    level: LogLevel
    message: str
    timestamp: datetime
    logger_name: str = ""
    exception: BaseException | None = None
    stack_trace: str | None = None
    sequence_id: int = 0
    user_stack_frame: str | None = None
    user_stack_frame_number: int | None = None
    parameters: tuple[Any, ...] = ()
    properties: Mapping[Any, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", _ensure_aware(self.timestamp))
        object.__setattr__(self, "parameters", tuple(self.parameters))
        object.__setattr__(self, "properties", dict(self.properties))

    @property
    def has_stack_trace(self) -> bool:
        return self.stack_trace is not None

    @property
    def formatted_message(self) -> str:
        """Return ``message`` with ``parameters`` interpolated (``%`` style).

        Examples
        --------
        >>> event = LogEvent(LogLevel.INFO, "hello %s", datetime(2025, 1, 1, tzinfo=timezone.utc), parameters=("bob",))
        >>> event.formatted_message
        'hello bob'
        """

        if not self.parameters:
            return self.message
        try:
            return self.message % self.parameters
        except (TypeError, ValueError):
            return self.message


_PUBLIC_ATTRIBUTE_NAMES = (
    "level",
    "message",
    "timestamp",
    "logger_name",
    "exception",
    "stack_trace",
    "sequence_id",
    "user_stack_frame",
    "user_stack_frame_number",
    "parameters",
    "properties",
    "has_stack_trace",
    "formatted_message",
)

PUBLIC_ATTRIBUTES: Mapping[str, Callable[[LogEvent], Any]] = MappingProxyType(
    {name: attrgetter(name) for name in _PUBLIC_ATTRIBUTE_NAMES}
)
"""Lower-case public attribute name -> accessor for :class:`LogEvent`."""


__all__ = ["LogEvent", "PUBLIC_ATTRIBUTES", "next_sequence_id"]
