"""
Stateless trace routes: grouping raw span batches, waterfall layout and service colours.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from typing import Dict, List

from fastapi import APIRouter

from api.requests import ColorRequest, SpanBatchRequest, TimelineRequest
from api.responses import TimelineLayout, TraceSummary
from api.routes.exception import handle_exceptions
from engine import traces
from engine.spans import normalize_spans

router = APIRouter(tags=["Traces"])


@router.post("/traces/summaries", response_model=List[TraceSummary])
@handle_exceptions
async def trace_summaries(req: SpanBatchRequest) -> List[TraceSummary]:
    summaries = traces.group_traces(normalize_spans(req.spans))
    if req.filter is None:
        return summaries
    criteria = traces.TraceFilter(
        service=req.filter.service,
        status=req.filter.status,
        search=req.filter.search,
        duration_min_ms=req.filter.duration_min_ms,
        duration_max_ms=req.filter.duration_max_ms,
    )
    summaries = traces.filter_summaries(summaries, criteria)
    if req.filter.sort_by:
        summaries = traces.sort_summaries(summaries, req.filter.sort_by, req.filter.descending)
    return summaries


@router.post("/traces/timeline", response_model=TimelineLayout)
@handle_exceptions
async def trace_timeline(req: TimelineRequest) -> TimelineLayout:
    return traces.build_timeline(normalize_spans(req.spans))


@router.post("/traces/colors", response_model=Dict[str, str])
@handle_exceptions
async def service_colors(req: ColorRequest) -> Dict[str, str]:
    # stateless callers get a fresh map; colours are deterministic per name anyway
    cache: Dict[str, str] = {}
    return {service: traces.service_color(service, cache) for service in req.services}
