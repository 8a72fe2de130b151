"""Error taxonomy for document building and HTTP delivery.

Synchronous errors (:class:`ConfigurationError`) surface to whoever asked for
the document. Asynchronous errors (:class:`DeliveryError`,
:class:`CancellationError`, :class:`DisposalError`) stop at the poster
boundary and are only reported through logging, diagnostics, or the
configured failure callback.
"""

from __future__ import annotations


class JsonPostError(Exception):
    """Base class for every error raised by the shipper."""


class ConfigurationError(JsonPostError):
    """A declared field (or template placeholder) cannot be resolved."""

    def __init__(self, field_name: str, message: str | None = None) -> None:
        self.field_name = field_name
        super().__init__(message or f"Property {field_name!r} not present in log event")


class DeliveryError(JsonPostError):
    """An HTTP delivery failed, timed out, or returned a non-2xx status."""

    def __init__(self, uri: str, message: str, *, status_code: int | None = None) -> None:
        self.uri = uri
        self.status_code = status_code
        super().__init__(message)


class CancellationError(JsonPostError):
    """A delivery was cancelled before it completed."""

    def __init__(self, uri: str) -> None:
        self.uri = uri
        super().__init__(f"Delivery to {uri} was cancelled")


class DisposalError(JsonPostError):
    """Releasing the HTTP client or its event loop failed."""


__all__ = [
    "CancellationError",
    "ConfigurationError",
    "DeliveryError",
    "DisposalError",
    "JsonPostError",
]
