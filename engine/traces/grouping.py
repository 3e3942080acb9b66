"""
Trace grouping: rebuilds per-trace summaries from a flat, unordered span batch,
plus the list filtering and ordering helpers used by trace list views.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from api.responses import TraceSummary
from engine.enums import SpanStatus
from engine.spans import Span
from config import settings


@dataclass(frozen=True)
class TraceFilter:
    service: Optional[str] = None
    status: Optional[str] = None
    search: Optional[str] = None
    duration_min_ms: Optional[float] = None
    duration_max_ms: Optional[float] = None


def resolve_root(spans: Sequence[Span]) -> Optional[Span]:
    """First span without a parent, else the earliest span.

    ``spans`` must already be in chronological order. When several disjoint
    roots share a trace id the chronologically first one wins.
    """
    for span in spans:
        if span.parent_id is None:
            return span
    return spans[0] if spans else None


def _empty_summary(trace_id: str) -> TraceSummary:
    return TraceSummary(trace_id=trace_id, root_operation=settings.unknown_operation)


def summarize(trace_id: str, spans: Iterable[Span]) -> TraceSummary:
    ordered = sorted(spans, key=lambda s: s.start_time)
    root = resolve_root(ordered)
    if root is None:
        return _empty_summary(trace_id)

    min_start = min(s.start_time for s in ordered)
    max_end = max(s.end_time for s in ordered)
    errors = sum(1 for s in ordered if s.status == SpanStatus.error)

    return TraceSummary(
        trace_id=trace_id,
        root_operation=root.operation_name,
        status=SpanStatus.error if errors > 0 else SpanStatus.ok,
        errors=errors,
        total_duration=max(0.0, max_end - min_start),
        span_count=len(ordered),
        service_count=len({s.service for s in ordered}),
        timestamp=root.start_time,
        spans=ordered,
    )


def group_traces(spans: Iterable[Span]) -> List[TraceSummary]:
    groups: Dict[str, List[Span]] = {}
    for span in spans:
        groups.setdefault(span.trace_id, []).append(span)
    return [summarize(trace_id, members) for trace_id, members in groups.items()]


def _matches_search(summary: TraceSummary, needle: str) -> bool:
    if needle in summary.trace_id.lower() or needle in summary.root_operation.lower():
        return True
    for span in summary.spans:
        if needle in span.operation_name.lower():
            return True
        for key, value in span.tags.items():
            if needle in str(key).lower() or needle in str(value).lower():
                return True
    return False


def filter_summaries(summaries: Iterable[TraceSummary], criteria: TraceFilter) -> List[TraceSummary]:
    status = (criteria.status or "all").strip().lower()
    needle = (criteria.search or "").strip().lower()

    results: List[TraceSummary] = []
    for summary in summaries:
        if criteria.service and not any(s.service == criteria.service for s in summary.spans):
            continue
        if status != "all" and summary.status.value != status:
            continue
        if criteria.duration_min_ms is not None and summary.total_duration < criteria.duration_min_ms:
            continue
        if criteria.duration_max_ms is not None and summary.total_duration > criteria.duration_max_ms:
            continue
        if needle and not _matches_search(summary, needle):
            continue
        results.append(summary)
    return results


_SORT_KEYS = {
    "timestamp": lambda s: s.timestamp,
    "duration": lambda s: s.total_duration,
    "spans": lambda s: s.span_count,
    "errors": lambda s: s.errors,
}


def sort_summaries(
    summaries: Iterable[TraceSummary],
    key: str = "timestamp",
    descending: bool = False,
) -> List[TraceSummary]:
    if key not in _SORT_KEYS:
        raise ValueError(f"Unsupported sort key: {key!r}")
    return sorted(summaries, key=_SORT_KEYS[key], reverse=descending)
