"""Public package surface of the non-blocking JSON log shipper.

The runtime façade (``init``, ``write``, ``flush``, ``shutdown``) covers host
applications; the builder, poster, and layout classes are exported for
integrations that wire their own pipeline.
"""

from __future__ import annotations

from .adapters import HttpJsonPoster, TemplateLayout
from .application.use_cases import DocumentBuilder, resolve_event_value
from .domain import (
    CancellationError,
    ConfigurationError,
    DeliveryError,
    DisposalError,
    EventLookup,
    FailurePolicy,
    FieldSpec,
    InFlightCounter,
    JsonPostError,
    LogEvent,
    LogLevel,
    StaticLayout,
    next_sequence_id,
)
from .runtime import (
    JsonPostConfig,
    flush,
    flush_async,
    init,
    inspect_runtime,
    is_initialised,
    shutdown,
    shutdown_async,
    write,
)

__all__ = [
    "CancellationError",
    "ConfigurationError",
    "DeliveryError",
    "DisposalError",
    "DocumentBuilder",
    "EventLookup",
    "FailurePolicy",
    "FieldSpec",
    "HttpJsonPoster",
    "InFlightCounter",
    "JsonPostConfig",
    "JsonPostError",
    "LogEvent",
    "LogLevel",
    "StaticLayout",
    "TemplateLayout",
    "flush",
    "flush_async",
    "init",
    "inspect_runtime",
    "is_initialised",
    "next_sequence_id",
    "resolve_event_value",
    "shutdown",
    "shutdown_async",
    "write",
]
