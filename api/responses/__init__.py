"""
Response models for API endpoints and internal data structures.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Any, List, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel

from engine.enums import DetailState, SpanStatus
from engine.spans import Span


def _coerce(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _coerce(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_coerce(v) for v in obj]
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    return obj


class NpModel(BaseModel):

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_serializer(mode="wrap")
    def _serialize(self, handler: Any) -> Any:
        return _coerce(handler(self))


class TraceSummary(NpModel):

    trace_id: str
    root_operation: str
    status: SpanStatus = SpanStatus.ok
    errors: int = 0
    total_duration: float = 0.0
    span_count: int = 0
    service_count: int = 0
    timestamp: float = 0.0
    spans: List[Span] = Field(default_factory=list)


class TimelineRow(NpModel):

    span: Span
    left_percent: float
    width_percent: float
    depth: int
    duration_label: str


class TimelineLayout(NpModel):

    min_time: float = 0.0
    max_time: float = 0.0
    total_duration: float = 0.0
    rows: List[TimelineRow] = Field(default_factory=list)


class ServiceColor(NpModel):

    service: str
    color: str


class TraceDetailView(NpModel):
    """Everything a waterfall view needs for one selected trace."""

    trace_id: str
    state: DetailState
    partial: bool = False
    error: Optional[str] = None
    summary: Optional[TraceSummary] = None
    timeline: TimelineLayout
    legend: List[ServiceColor] = Field(default_factory=list)


class HealthStatus(NpModel):

    status: str
    detail_backend: str
    sessions: int
