"""Use case turning a log event into the configured JSON document.

Purpose
-------
Map an event's heterogeneous value sources (well-known attributes, the open
property bag, public attributes) onto a flat, ordered document and serialise
it to JSON text.

Contents
--------
* :data:`WELL_KNOWN_ACCESSORS` - first lookup tier.
* :func:`compile_lookup` / :func:`resolve_event_value` - the three-tier lookup.
* :class:`DocumentBuilder` - compiles a field list once and builds documents.

System Role
-----------
Invoked by the write use case for every event. Templates (URL and static field
layouts) reuse :func:`compile_lookup` so ``{Message}`` and a ``message`` field
resolve identically.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

from lib_log_jsonpost.application.ports.layout import LayoutPort
from lib_log_jsonpost.domain.document import Document, encode_document
from lib_log_jsonpost.domain.errors import ConfigurationError
from lib_log_jsonpost.domain.events import PUBLIC_ATTRIBUTES, LogEvent
from lib_log_jsonpost.domain.fields import FieldSpec, StaticLayout


Accessor = Callable[[LogEvent], Any]
LayoutFactory = Callable[[str], LayoutPort]


def _stringified_properties(event: LogEvent) -> dict[str, Any]:
    return {str(key): value for key, value in event.properties.items()}


WELL_KNOWN_ACCESSORS: Mapping[str, Accessor] = MappingProxyType(
    {
        "exception": lambda event: event.exception,
        "stacktrace": lambda event: event.stack_trace,
        "level": lambda event: event.level,
        "loggername": lambda event: event.logger_name,
        "sequenceid": lambda event: event.sequence_id,
        "properties": _stringified_properties,
        "message": lambda event: event.message,
        "timestamp": lambda event: event.timestamp,
        "hasstacktrace": lambda event: event.has_stack_trace,
        "userstackframe": lambda event: event.user_stack_frame,
        "userstackframenumber": lambda event: event.user_stack_frame_number,
    }
)
"""Case-insensitive names that win over every other source."""


def _normalise_accessors(accessors: Mapping[str, Accessor]) -> Mapping[str, Accessor]:
    if accessors is PUBLIC_ATTRIBUTES:
        return accessors
    return {name.lower(): accessor for name, accessor in accessors.items()}


def compile_lookup(name: str, accessors: Mapping[str, Accessor] = PUBLIC_ATTRIBUTES) -> Accessor:
    """Return a callable resolving ``name`` against events.

    Lookup order, first match wins:

    1. :data:`WELL_KNOWN_ACCESSORS` (case-insensitive);
    2. ``event.properties[name]`` (exact key);
    3. ``accessors`` (case-insensitive public attributes).

    The returned callable raises :class:`ConfigurationError` when an event
    offers none of them.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> from lib_log_jsonpost.domain.levels import LogLevel
    >>> event = LogEvent(LogLevel.INFO, "ready", datetime(2025, 1, 1, tzinfo=timezone.utc), properties={"user": "ann"})
    >>> compile_lookup("Message")(event), compile_lookup("user")(event)
    ('ready', 'ann')
    >>> compile_lookup("Formatted_Message")(event)
    'ready'
    """

    well_known = WELL_KNOWN_ACCESSORS.get(name.lower())
    if well_known is not None:
        return well_known

    fallback = _normalise_accessors(accessors).get(name.lower())

    def resolve(event: LogEvent) -> Any:
        properties = event.properties
        if name in properties:
            return properties[name]
        if fallback is not None:
            return fallback(event)
        raise ConfigurationError(name)

    return resolve


def resolve_event_value(event: LogEvent, name: str, accessors: Mapping[str, Accessor] = PUBLIC_ATTRIBUTES) -> Any:
    """Resolve ``name`` against ``event`` using the three-tier lookup."""

    return compile_lookup(name, accessors)(event)


class DocumentBuilder:
    """Build JSON documents for a fixed, ordered field list.

    Each field is compiled once at construction: static layouts become
    :class:`LayoutPort` instances via ``layout_factory``, lookups pre-resolve
    their accessor tiers. :meth:`build` is then a pure function of the event.
    """

    def __init__(
        self,
        fields: Iterable[FieldSpec],
        *,
        layout_factory: LayoutFactory | None = None,
        accessors: Mapping[str, Accessor] = PUBLIC_ATTRIBUTES,
    ) -> None:
        self._fields = tuple(fields)
        names = [spec.name for spec in self._fields]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate field names: {', '.join(duplicates)}")
        self._layout_factory = layout_factory
        self._accessors = accessors
        self._resolvers: tuple[tuple[str, Accessor], ...] = tuple((spec.name, self._compile(spec)) for spec in self._fields)

    @property
    def fields(self) -> tuple[FieldSpec, ...]:
        return self._fields

    def build_document(self, event: LogEvent) -> Document:
        """Return the ordered ``{field name: value}`` mapping for ``event``."""

        return {name: resolve(event) for name, resolve in self._resolvers}

    def build(self, event: LogEvent) -> str:
        """Return the JSON text for ``event``.

        Raises
        ------
        ConfigurationError
            When a looked-up field resolves against none of the tiers.
        """

        return encode_document(self.build_document(event))

    def _compile(self, spec: FieldSpec) -> Accessor:
        resolver = spec.resolver
        if isinstance(resolver, StaticLayout):
            if self._layout_factory is None:
                raise ValueError(f"field {spec.name!r} uses a template but no layout factory was configured")
            return self._layout_factory(resolver.template).render
        return compile_lookup(spec.name, self._accessors)


__all__ = [
    "DocumentBuilder",
    "LayoutFactory",
    "WELL_KNOWN_ACCESSORS",
    "compile_lookup",
    "resolve_event_value",
]
