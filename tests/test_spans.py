"""
Test cases for the span model and normalisation of raw backend span rows.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import pytest
from pydantic import ValidationError

from engine.enums import SpanStatus
from engine.spans import Span, normalize_span, normalize_spans


def test_span_defaults_tolerate_missing_fields():
    span = Span()
    assert span.id == ""
    assert span.service == ""
    assert span.duration == 0.0
    assert span.parent_id is None
    assert span.status == SpanStatus.ok
    assert span.tags == {}


def test_span_accepts_camel_case_and_snake_case():
    a = Span.model_validate({"id": "a", "traceId": "t1", "parentId": "p", "operationName": "GET", "startTime": 5})
    b = Span(id="a", trace_id="t1", parent_id="p", operation_name="GET", start_time=5)
    assert a == b
    assert a.model_dump(by_alias=True)["traceId"] == "t1"


def test_span_coerces_malformed_values():
    span = Span.model_validate({"id": 7, "duration": None, "parentId": "", "status": "ERROR", "startTime": float("nan")})
    assert span.id == "7"
    assert span.duration == 0.0
    assert span.parent_id is None
    assert span.is_root
    assert span.status == SpanStatus.error
    assert span.start_time == 0.0
    assert Span(duration=-5).duration == 0.0
    assert Span(status="weird").status == SpanStatus.ok


def test_span_is_immutable():
    span = Span(id="a")
    with pytest.raises(ValidationError):
        span.id = "b"


def test_span_end_time():
    assert Span(start_time=1000, duration=50).end_time == 1050


def test_normalize_keeps_explorer_shaped_rows_untouched():
    span = normalize_span({"id": "a", "traceId": "t1", "service": "api", "startTime": 1000, "duration": 2_000_000})
    assert span.start_time == 1000
    assert span.duration == 2_000_000


def test_normalize_maps_backend_field_names():
    span = normalize_span({
        "span_id": "s1",
        "trace_id": "t1",
        "parent_span_id": "s0",
        "service_name": "checkout",
        "operation_name": "POST /pay",
        "start_time": "2024-01-01T00:00:00Z",
        "duration": 5_000_000_000,
        "status": {"code": 1, "message": "boom"},
        "tags": {"http.status_code": 500},
    })
    assert span.id == "s1"
    assert span.parent_id == "s0"
    assert span.service == "checkout"
    assert span.operation_name == "POST /pay"
    assert span.start_time == 1704067200000.0
    assert span.duration == 5000.0
    assert span.status == SpanStatus.error
    assert span.tags == {"http.status_code": 500}


def test_normalize_unit_heuristics():
    assert normalize_span({"startTime": 1_700_000_000_000_000_000}).start_time == pytest.approx(1_700_000_000_000)
    assert normalize_span({"startTime": 1_700_000_000_000_000}).start_time == pytest.approx(1_700_000_000_000)
    assert normalize_span({"duration": 2_500_000}).duration == pytest.approx(2500)
    assert normalize_span({"duration": 250}).duration == 250


def test_normalize_defaults_and_status_variants():
    span = normalize_span({})
    assert span.service == "unknown"
    assert span.operation_name == "unknown"
    assert normalize_span({"status": "STATUS_CODE_ERROR"}).status == SpanStatus.error
    assert normalize_span({"status": {"code": 0}}).status == SpanStatus.ok


def test_normalize_spans_skips_non_mappings():
    existing = Span(id="x")
    rows = normalize_spans([existing, {"span_id": "y"}, "garbage", None])
    assert [s.id for s in rows] == ["x", "y"]
    assert rows[0] is existing
    assert normalize_spans(None) == []


def test_normalize_keeps_explicit_empty_service():
    assert normalize_span({"id": "a", "traceId": "t", "service": "", "startTime": 1}).service == ""
    assert normalize_span({"span_id": "a", "service_name": "", "operation_name": ""}).operation_name == ""
    assert normalize_span({"span_id": "a", "service": None}).service == "unknown"
