"""Document type and its JSON encoding.

A document maps field names to resolved values; it is built fresh per event,
serialised once, and discarded. Values that :mod:`json` does not handle
natively are converted by :func:`to_json_value`.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping, Set
from datetime import date, datetime
from enum import Enum
from typing import Any

Document = dict[str, Any]


def to_json_value(value: Any) -> Any:
    """Convert ``value`` into something :func:`json.dumps` understands.

    Examples
    --------
    >>> from lib_log_jsonpost.domain.levels import LogLevel
    >>> to_json_value(LogLevel.INFO)
    'INFO'
    >>> to_json_value(float("nan")) is None
    True
    >>> to_json_value({1: ValueError("bad")})
    {'1': {'type': 'ValueError', 'message': 'bad'}}
    """

    if isinstance(value, float) and not math.isfinite(value):
        return None
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, BaseException):
        return {"type": type(value).__name__, "message": str(value)}
    if isinstance(value, Mapping):
        return {str(key): to_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, Set)):
        return [to_json_value(item) for item in value]
    return str(value)


def render_text(value: Any) -> str:
    """Return the string form used when a value is interpolated into a template.

    Examples
    --------
    >>> render_text(None)
    ''
    >>> from lib_log_jsonpost.domain.levels import LogLevel
    >>> render_text(LogLevel.WARNING)
    'WARNING'
    """

    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (Enum, datetime, date)):
        return to_json_value(value)
    return str(value)


def encode_document(document: Mapping[str, Any]) -> str:
    """Serialise ``document`` to compact JSON text, keeping field order.

    Examples
    --------
    >>> encode_document({"level": "INFO", "msg": "ready"})
    '{"level":"INFO","msg":"ready"}'
    """

    return json.dumps(to_json_value(document), ensure_ascii=False, allow_nan=False, separators=(",", ":"))


__all__ = ["Document", "encode_document", "render_text", "to_json_value"]
