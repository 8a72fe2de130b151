"""Adapter implementations for the JSON shipper ports."""

from __future__ import annotations

from .http_poster import JSON_CONTENT_TYPE, HttpJsonPoster
from .layout import TemplateLayout

__all__ = ["HttpJsonPoster", "JSON_CONTENT_TYPE", "TemplateLayout"]
