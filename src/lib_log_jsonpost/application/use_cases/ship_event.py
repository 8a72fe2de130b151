"""Use case shipping one log event to its destination.

Purpose
-------
Tie together URL rendering, document building, and the non-blocking poster
behind the synchronous ``write`` entry point a logging framework calls.

Contents
--------
* :func:`create_write_event` factory returning the runtime callable.
* :func:`notify` helper delivering results to continuations.

System Role
-----------
``write`` never raises: synchronous failures (unresolvable fields, invalid
destination URIs, a closed poster) go to the continuation, and the network
work happens on the poster's own loop after ``write`` returned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from urllib.parse import urlsplit

from lib_log_jsonpost.application.ports.layout import LayoutPort
from lib_log_jsonpost.application.ports.poster import PosterPort
from lib_log_jsonpost.domain.events import LogEvent

from .build_document import DocumentBuilder

logger = logging.getLogger(__name__)

Continuation = Callable[[BaseException | None], None]
WriteCallable = Callable[[LogEvent, "Continuation | None"], None]

_ALLOWED_SCHEMES = frozenset({"http", "https"})


def notify(continuation: Continuation | None, error: BaseException | None) -> None:
    """Invoke ``continuation`` with ``error``, logging instead of raising.

    Without a continuation, errors are logged at ERROR so they are not lost.
    """

    if continuation is None:
        if error is not None:
            logger.error("JSON post failed: %s", error, exc_info=error)
        return
    try:
        continuation(error)
    except Exception as exc:  # noqa: BLE001
        logger.error("Continuation raised while reporting %r", error, exc_info=exc)


def validate_destination(uri: str) -> str:
    """Return ``uri`` when it is an absolute http(s) URL.

    Examples
    --------
    >>> validate_destination("https://logs.example/ingest")
    'https://logs.example/ingest'
    >>> validate_destination("logs.example")
    Traceback (most recent call last):
    ...
    ValueError: Invalid destination URI: 'logs.example'
    """

    parts = urlsplit(uri)
    if parts.scheme.lower() not in _ALLOWED_SCHEMES or not parts.netloc:
        raise ValueError(f"Invalid destination URI: {uri!r}")
    return uri


def create_write_event(
    *,
    url_layout: LayoutPort,
    builder: DocumentBuilder,
    poster: PosterPort,
) -> WriteCallable:
    """Build the ``write`` callable capturing the configured collaborators.

    Parameters
    ----------
    url_layout:
        Layout rendering the destination URI per event.
    builder:
        :class:`DocumentBuilder` compiled from the configured field list.
    poster:
        Non-blocking :class:`PosterPort` delivering the JSON text.

    Returns
    -------
    Callable[[LogEvent, Continuation | None], None]
        Function that dispatches the event and reports ``None`` (dispatched)
        or the synchronous exception to the continuation.
    """

    def write(event: LogEvent, continuation: Continuation | None = None) -> None:
        try:
            uri = validate_destination(url_layout.render(event))
            payload = builder.build(event)
            logger.debug("Sending: %s", payload)
            poster.post(uri, payload)
        except Exception as exc:  # noqa: BLE001
            notify(continuation, exc)
            return
        notify(continuation, None)

    return write


__all__ = ["Continuation", "WriteCallable", "create_write_event", "notify", "validate_destination"]
