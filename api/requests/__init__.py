from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from engine.enums import DataSourceKind


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SummaryFilter(CamelModel):
    service: Optional[str] = None
    status: Optional[str] = Field(default=None, pattern="^(ok|error|all)$")
    search: Optional[str] = None
    duration_min_ms: Optional[float] = Field(default=None, ge=0.0)
    duration_max_ms: Optional[float] = Field(default=None, ge=0.0)
    sort_by: Optional[str] = Field(default=None, pattern="^(timestamp|duration|spans|errors)$")
    descending: bool = False


class SpanBatchRequest(CamelModel):
    # raw backend rows or already-normalised spans, see engine.spans.normalize_span
    spans: List[Dict[str, Any]] = Field(default_factory=list)
    filter: Optional[SummaryFilter] = None


class TimelineRequest(CamelModel):
    spans: List[Dict[str, Any]] = Field(default_factory=list)


class ColorRequest(CamelModel):
    services: List[str] = Field(default_factory=list)


class SessionBatchRequest(CamelModel):
    spans: List[Dict[str, Any]] = Field(default_factory=list)
    provider: Optional[str] = None
    data_source: DataSourceKind = DataSourceKind.traces
