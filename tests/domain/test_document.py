from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum

import pytest

from lib_log_jsonpost.domain.document import encode_document, render_text, to_json_value
from lib_log_jsonpost.domain.levels import LogLevel


class _Colour(Enum):
    RED = 1


def test_encode_document_is_compact_and_ordered() -> None:
    assert encode_document({"level": LogLevel.INFO, "msg": "ready"}) == '{"level":"INFO","msg":"ready"}'
    assert list(json.loads(encode_document({"b": 1, "a": 2}))) == ["b", "a"]


def test_scalars_keep_their_json_types() -> None:
    decoded = json.loads(encode_document({"n": 3, "f": 1.5, "ok": True, "none": None}))
    assert decoded == {"n": 3, "f": 1.5, "ok": True, "none": None}


def test_strings_are_escaped_and_unicode_is_kept() -> None:
    payload = encode_document({"msg": 'say "hi"\nnaïve'})
    assert "naïve" in payload
    assert json.loads(payload)["msg"] == 'say "hi"\nnaïve'


def test_rich_values_are_converted() -> None:
    stamp = datetime(2025, 9, 23, 12, 0, tzinfo=timezone.utc)
    value = to_json_value(
        {
            "when": stamp,
            "error": KeyError("missing"),
            "colour": _Colour.RED,
            "nested": {1: (1, 2)},
            "other": object.__new__(type("Opaque", (), {"__str__": lambda self: "opaque"})),
        }
    )
    assert value["when"] == "2025-09-23T12:00:00+00:00"
    assert value["error"] == {"type": "KeyError", "message": "'missing'"}
    assert value["colour"] == "RED"
    assert value["nested"] == {"1": [1, 2]}
    assert value["other"] == "opaque"


def test_render_text_for_templates() -> None:
    assert render_text(None) == ""
    assert render_text(LogLevel.ERROR) == "ERROR"
    assert render_text(datetime(2025, 1, 1, tzinfo=timezone.utc)) == "2025-01-01T00:00:00+00:00"
    assert render_text(12) == "12"


def test_non_finite_floats_become_null() -> None:
    payload = encode_document({"properties": {"ratio": float("nan"), "big": float("inf"), "small": float("-inf"), "ok": 0.5}})

    assert payload == '{"properties":{"ratio":null,"big":null,"small":null,"ok":0.5}}'
    assert json.loads(payload, parse_constant=lambda token: pytest.fail(f"non-standard JSON token {token}")) == {
        "properties": {"ratio": None, "big": None, "small": None, "ok": 0.5}
    }
