"""Log level abstraction shared by events, documents, and templates.

Purpose
-------
Offer a domain-specific representation of log severities that renders the
same way in JSON documents, URL templates, and field layouts.

Contents
--------
* :class:`LogLevel` enum with conversion helpers.

System Role
-----------
Used by :class:`~lib_log_jsonpost.domain.events.LogEvent` and by the document
encoder, which emits the upper-case level name (``"INFO"``).
"""

from __future__ import annotations

from enum import Enum


class LogLevel(Enum):
    """Enumerated logging levels used throughout the system."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    def __str__(self) -> str:
        return self.name

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        normalized = name.strip().upper()
        if normalized == "WARN":
            normalized = "WARNING"
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown log level: {name!r}") from exc


def coerce_level(level: str | LogLevel) -> LogLevel:
    """Normalise level inputs (string or enum) into :class:`LogLevel`.

    Examples
    --------
    >>> coerce_level("warning") is LogLevel.WARNING
    True
    >>> coerce_level(LogLevel.ERROR) is LogLevel.ERROR
    True
    """
    if isinstance(level, LogLevel):
        return level
    return LogLevel.from_name(level)


__all__ = ["LogLevel", "coerce_level"]
