"""
Span model and normalisation of raw backend span payloads.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from engine.enums import SpanStatus
from config import UNKNOWN_SERVICE, settings


def _finite(value: Any) -> float | None:
    try:
        if value is None:
            return None
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    if not np.isfinite(numeric):
        return None
    return numeric


class Span(BaseModel):
    """A single timed operation within a distributed trace.

    Times are epoch milliseconds. Missing fields fall back to empty values so
    that partially populated backend rows still group and render.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str = ""
    trace_id: str = ""
    parent_id: Optional[str] = None
    service: str = ""
    operation_name: str = ""
    start_time: float = 0.0
    duration: float = 0.0
    status: SpanStatus = SpanStatus.ok
    tags: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("id", "trace_id", "service", "operation_name", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("parent_id", mode="before")
    @classmethod
    def _parent(cls, v: Any) -> Optional[str]:
        if v is None or v == "":
            return None
        return str(v)

    @field_validator("start_time", mode="before")
    @classmethod
    def _start(cls, v: Any) -> float:
        numeric = _finite(v)
        return 0.0 if numeric is None else numeric

    @field_validator("duration", mode="before")
    @classmethod
    def _duration(cls, v: Any) -> float:
        numeric = _finite(v)
        if numeric is None or numeric < 0:
            return 0.0
        return numeric

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v: Any) -> SpanStatus:
        return SpanStatus.coerce(v)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, v: Any) -> Dict[str, Any]:
        return dict(v) if isinstance(v, Mapping) else {}

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _first(raw: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    # only absent or null fields fall through; "" is a real value
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return default


def _start_millis(value: Any) -> float:
    if isinstance(value, str):
        text = value.strip()
        try:
            return float(text)
        except ValueError:
            pass
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return 0.0
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.timestamp() * 1000.0
    numeric = _finite(value)
    if numeric is None:
        return 0.0
    if numeric > settings.start_time_ns_threshold:
        return numeric / 1e6
    if numeric > settings.start_time_us_threshold:
        return numeric / 1e3
    return numeric


def _duration_millis(value: Any) -> float:
    numeric = _finite(value)
    if not numeric:
        return 0.0
    # backends report nanoseconds or microseconds for the same field
    if numeric > settings.duration_ns_threshold:
        return numeric / 1e6
    if numeric > settings.duration_us_threshold:
        return numeric / 1e3
    return numeric


def _status(value: Any) -> SpanStatus:
    if isinstance(value, Mapping):
        code = value.get("code")
        if code == 1 or str(code).upper() == "STATUS_CODE_ERROR":
            return SpanStatus.error
        return SpanStatus.ok
    if isinstance(value, str) and value.upper() == "STATUS_CODE_ERROR":
        return SpanStatus.error
    return SpanStatus.coerce(value)


def normalize_span(raw: Union[Span, Mapping[str, Any]]) -> Span:
    if isinstance(raw, Span):
        return raw
    # rows already in explorer shape keep their millisecond values untouched
    if raw.get("id") and raw.get("service") and _is_number(raw.get("startTime")):
        return Span.model_validate(raw)

    start = _first(raw, "startTime", "start_time")
    tags = raw.get("tags")
    return Span(
        id=_first(raw, "id", "spanId", "span_id", default=""),
        trace_id=_first(raw, "traceId", "trace_id", default=""),
        parent_id=_first(raw, "parentId", "parent_id", "parent_span_id"),
        service=_first(raw, "service", "serviceName", "service_name", default=UNKNOWN_SERVICE),
        operation_name=_first(raw, "operationName", "operation_name", "operation", "name", default="unknown"),
        start_time=_start_millis(start) if start else 0.0,
        duration=_duration_millis(raw.get("duration")),
        status=_status(raw.get("status")),
        tags=tags if isinstance(tags, Mapping) else {},
    )


def normalize_spans(items: Optional[Iterable[Union[Span, Mapping[str, Any]]]]) -> List[Span]:
    return [normalize_span(item) for item in (items or []) if isinstance(item, (Span, Mapping))]
