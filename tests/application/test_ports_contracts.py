from __future__ import annotations

import httpx

from lib_log_jsonpost.adapters.http_poster import HttpJsonPoster
from lib_log_jsonpost.adapters.layout import TemplateLayout
from lib_log_jsonpost.application.ports.layout import LayoutPort
from lib_log_jsonpost.application.ports.poster import PosterPort


def test_template_layout_satisfies_layout_port() -> None:
    assert isinstance(TemplateLayout("{Message}"), LayoutPort)


def test_http_poster_satisfies_poster_port() -> None:
    poster = HttpJsonPoster(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    try:
        assert isinstance(poster, PosterPort)
    finally:
        poster.close()
