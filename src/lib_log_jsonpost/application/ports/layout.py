"""Port describing template rendering against a log event."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lib_log_jsonpost.domain.events import LogEvent


@runtime_checkable
class LayoutPort(Protocol):
    """Render a configured template for one event."""

    def render(self, event: LogEvent) -> str:
        """Return the rendered text for ``event``."""


__all__ = ["LayoutPort"]
