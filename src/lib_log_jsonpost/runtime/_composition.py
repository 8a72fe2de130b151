"""Runtime composition wiring domain, application, and adapters.

Purpose
-------
Translate :class:`RuntimeSettings` into the live :class:`JsonPostRuntime`
referenced by the façade. Adapter choices (``httpx`` poster, brace templates)
are made here so the use cases only see ports.
"""

from __future__ import annotations

import httpx

from lib_log_jsonpost.adapters.http_poster import HttpJsonPoster
from lib_log_jsonpost.adapters.layout import TemplateLayout
from lib_log_jsonpost.application.use_cases.build_document import DocumentBuilder
from lib_log_jsonpost.application.use_cases.ship_event import create_write_event
from lib_log_jsonpost.application.use_cases.shutdown import create_flush, create_shutdown

from ._settings import RuntimeSettings
from ._state import JsonPostRuntime


def build_runtime(settings: RuntimeSettings, *, transport: httpx.AsyncBaseTransport | None = None) -> JsonPostRuntime:
    """Assemble the shipping runtime from resolved settings.

    ``transport`` replaces the network transport of the poster; tests pass an
    :class:`httpx.MockTransport`.
    """

    url_layout = TemplateLayout(settings.url)
    builder = DocumentBuilder(settings.fields, layout_factory=TemplateLayout)
    poster = create_poster(settings, transport=transport)
    return JsonPostRuntime(
        settings=settings,
        url_layout=url_layout,
        builder=builder,
        poster=poster,
        write=create_write_event(url_layout=url_layout, builder=builder, poster=poster),
        flush_async=create_flush(poster=poster),
        shutdown_async=create_shutdown(poster=poster, timeout=settings.shutdown_timeout),
    )


def create_poster(settings: RuntimeSettings, *, transport: httpx.AsyncBaseTransport | None = None) -> HttpJsonPoster:
    """Instantiate the poster with the configured delivery behaviour."""

    return HttpJsonPoster(
        throw_on_failure=settings.throw_on_failure,
        timeout=settings.timeout,
        headers=settings.headers,
        failure_policy=settings.failure_policy,
        on_failure=settings.on_failure,
        max_concurrency=settings.max_concurrency,
        poll_interval=settings.poll_interval,
        transport=transport,
        diagnostic=settings.diagnostic_hook,
    )


__all__ = ["build_runtime", "create_poster"]
