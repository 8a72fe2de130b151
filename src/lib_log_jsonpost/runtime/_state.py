"""Runtime state container and access helpers."""

from __future__ import annotations

from dataclasses import dataclass
from threading import RLock
from typing import Awaitable, Callable

from lib_log_jsonpost.adapters.http_poster import HttpJsonPoster
from lib_log_jsonpost.adapters.layout import TemplateLayout
from lib_log_jsonpost.application.use_cases.build_document import DocumentBuilder
from lib_log_jsonpost.application.use_cases.ship_event import WriteCallable
from lib_log_jsonpost.application.use_cases.shutdown import FlushCallable

from ._settings import RuntimeSettings


@dataclass(slots=True)
class JsonPostRuntime:
    """Aggregate of live collaborators assembled by the composition root."""

    settings: RuntimeSettings
    url_layout: TemplateLayout
    builder: DocumentBuilder
    poster: HttpJsonPoster
    write: WriteCallable
    flush_async: FlushCallable
    shutdown_async: Callable[[], Awaitable[None]]


_STATE: JsonPostRuntime | None = None
_STATE_LOCK = RLock()


def set_runtime(runtime: JsonPostRuntime) -> None:
    """Install ``runtime`` as the active singleton."""

    with _STATE_LOCK:
        global _STATE
        _STATE = runtime


def clear_runtime() -> None:
    """Remove the active runtime if present."""

    with _STATE_LOCK:
        global _STATE
        _STATE = None


def current_runtime() -> JsonPostRuntime:
    """Return the active runtime or raise when uninitialised."""

    with _STATE_LOCK:
        if _STATE is None:
            raise RuntimeError("lib_log_jsonpost.init() must be called before shipping events")
        return _STATE


def is_initialised() -> bool:
    """Return ``True`` when :func:`lib_log_jsonpost.init` has been called."""

    with _STATE_LOCK:
        return _STATE is not None


__all__ = [
    "JsonPostRuntime",
    "clear_runtime",
    "current_runtime",
    "is_initialised",
    "set_runtime",
]
