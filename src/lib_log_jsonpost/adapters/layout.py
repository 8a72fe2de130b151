"""Brace-style template layout rendered against log events.

Purpose
-------
Render destination URLs and static field layouts such as
``"https://logs.example/{LoggerName}"`` or ``"{Level}: {Message}"``.

Contents
--------
* :class:`TemplateLayout` - :class:`LayoutPort` implementation built on
  :class:`string.Formatter` parsing.

System Role
-----------
Placeholders are resolved with the same three-tier lookup as document fields,
compiled once when the layout is created. ``{{`` and ``}}`` produce literal
braces; ``{name:spec}`` and ``{name!r}`` behave as in :meth:`str.format`.
"""

from __future__ import annotations

from collections.abc import Mapping
from string import Formatter
from typing import Any, Callable

from lib_log_jsonpost.application.ports.layout import LayoutPort
from lib_log_jsonpost.application.use_cases.build_document import Accessor, compile_lookup
from lib_log_jsonpost.domain.document import render_text
from lib_log_jsonpost.domain.events import PUBLIC_ATTRIBUTES, LogEvent

_FORMATTER = Formatter()

Segment = Callable[[LogEvent], str]


def _literal(text: str) -> Segment:
    return lambda _event: text


def _placeholder(name: str, conversion: str | None, format_spec: str, accessors: Mapping[str, Accessor]) -> Segment:
    lookup = compile_lookup(name, accessors)

    def render(event: LogEvent) -> str:
        value: Any = lookup(event)
        if conversion:
            value = _FORMATTER.convert_field(value, conversion)
        if format_spec:
            return format(value, format_spec)
        return render_text(value)

    return render


class TemplateLayout(LayoutPort):
    """Render ``template`` for each event.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> from lib_log_jsonpost.domain.levels import LogLevel
    >>> event = LogEvent(LogLevel.INFO, "ready", datetime(2025, 1, 1, tzinfo=timezone.utc), logger_name="app.db")
    >>> TemplateLayout("{Level} {LoggerName}: {Message}").render(event)
    'INFO app.db: ready'
    >>> TemplateLayout("{{literal}}").render(event)
    '{literal}'
    """

    def __init__(self, template: str, *, accessors: Mapping[str, Accessor] = PUBLIC_ATTRIBUTES) -> None:
        self._template = template
        segments: list[Segment] = []
        for literal, field_name, format_spec, conversion in _FORMATTER.parse(template):
            if literal:
                segments.append(_literal(literal))
            if field_name is None:
                continue
            if not field_name:
                raise ValueError(f"template {template!r} contains an empty placeholder")
            segments.append(_placeholder(field_name, conversion, format_spec or "", accessors))
        self._segments = tuple(segments)

    @property
    def template(self) -> str:
        return self._template

    def render(self, event: LogEvent) -> str:
        return "".join(segment(event) for segment in self._segments)

    def __repr__(self) -> str:
        return f"TemplateLayout({self._template!r})"


__all__ = ["TemplateLayout"]
