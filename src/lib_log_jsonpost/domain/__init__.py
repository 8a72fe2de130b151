"""Domain entities and value objects used by the JSON shipper."""

from __future__ import annotations

from .counter import InFlightCounter
from .document import Document, encode_document, render_text, to_json_value
from .errors import CancellationError, ConfigurationError, DeliveryError, DisposalError, JsonPostError
from .events import PUBLIC_ATTRIBUTES, LogEvent, next_sequence_id
from .fields import EventLookup, FieldSpec, StaticLayout, parse_fields
from .levels import LogLevel, coerce_level
from .policy import FailurePolicy

__all__ = [
    "CancellationError",
    "ConfigurationError",
    "DeliveryError",
    "DisposalError",
    "Document",
    "EventLookup",
    "FailurePolicy",
    "FieldSpec",
    "InFlightCounter",
    "JsonPostError",
    "LogEvent",
    "LogLevel",
    "PUBLIC_ATTRIBUTES",
    "StaticLayout",
    "coerce_level",
    "encode_document",
    "next_sequence_id",
    "parse_fields",
    "render_text",
    "to_json_value",
]
