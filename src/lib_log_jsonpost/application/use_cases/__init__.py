"""Use cases orchestrating document building and delivery."""

from __future__ import annotations

from .build_document import DocumentBuilder, compile_lookup, resolve_event_value
from .ship_event import create_write_event
from .shutdown import create_flush, create_shutdown

__all__ = [
    "DocumentBuilder",
    "compile_lookup",
    "create_flush",
    "create_shutdown",
    "create_write_event",
    "resolve_event_value",
]
