"""
Explorer session: the per-user context that owns the mutable explorer state
(current span batch, service colour map, trace detail cache, selection) and
wires query results and trace selections through the trace engine.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from api.responses import ServiceColor, TraceDetailView, TraceSummary
from datasources.base import QueryExecutor, QueryResult, TraceDetailResource
from engine.enums import DataSourceKind
from engine.spans import Span, normalize_spans
from engine.traces.colors import assign_colors, service_color, service_legend
from engine.traces.detail import TraceDetailCache
from engine.traces.grouping import group_traces
from engine.traces.timeline import build_timeline

log = logging.getLogger(__name__)


class ExplorerSession:
    def __init__(
        self,
        detail_resource: TraceDetailResource,
        provider: Optional[str] = None,
        palette: Optional[Sequence[str]] = None,
    ) -> None:
        self.provider = provider
        self.palette = palette
        self.colors: Dict[str, str] = {}
        self.details = TraceDetailCache(detail_resource)
        self.data_source: Optional[DataSourceKind] = None
        self.selected_trace_id: Optional[str] = None
        self._spans: List[Span] = []
        self._summaries: List[TraceSummary] = []
        self._query_generation = 0
        self._batch_generation = 0

    @property
    def spans(self) -> List[Span]:
        return list(self._spans)

    @property
    def summaries(self) -> List[TraceSummary]:
        return list(self._summaries)

    def summary(self, trace_id: str) -> Optional[TraceSummary]:
        for summary in self._summaries:
            if summary.trace_id == trace_id:
                return summary
        return None

    def color_for(self, service: str) -> str:
        return service_color(service, self.colors, self.palette)

    def begin_query(self) -> int:
        self._query_generation += 1
        return self._query_generation

    def apply_result(self, token: int, result: QueryResult) -> bool:
        if token != self._query_generation:
            log.debug("discarding stale query result token=%d current=%d", token, self._query_generation)
            return False
        self.replace_batch(result.spans, data_source=result.data_source)
        return True

    async def run_query(
        self,
        executor: QueryExecutor,
        query: str,
        start: int,
        end: int,
    ) -> bool:
        token = self.begin_query()
        result = await executor.execute(query, start, end, self.provider)
        return self.apply_result(token, result)

    def replace_batch(
        self,
        spans: Optional[Iterable[Union[Span, Mapping[str, Any]]]],
        data_source: DataSourceKind = DataSourceKind.traces,
        provider: Optional[str] = None,
    ) -> List[TraceSummary]:
        # detail fetches started against the previous batch must not render
        self._batch_generation += 1
        if provider:
            self.provider = provider
        self.data_source = data_source
        self._spans = normalize_spans(spans) if data_source == DataSourceKind.traces else []
        self._summaries = group_traces(self._spans)
        self.details.clear()
        self.selected_trace_id = None
        assign_colors(self._spans, self.colors, self.palette)
        log.info("span batch replaced spans=%d traces=%d", len(self._spans), len(self._summaries))
        return self.summaries

    def deselect(self) -> None:
        self.selected_trace_id = None

    def fallback_spans(self, trace_id: str) -> List[Span]:
        summary = self.summary(trace_id)
        return list(summary.spans) if summary is not None else []

    async def select(self, trace_id: str) -> Optional[TraceDetailView]:
        """Resolve the waterfall for ``trace_id``.

        Returns ``None`` when another trace was selected, or a new span batch
        arrived, while the detail fetch was in flight; the late result is
        dropped rather than rendered.
        """
        self.selected_trace_id = trace_id
        batch = self._batch_generation
        detail = await self.details.load(trace_id, self.provider, self.fallback_spans(trace_id))
        if batch != self._batch_generation:
            log.debug("dropping detail for trace_id=%s, span batch replaced", trace_id)
            return None
        if self.selected_trace_id != trace_id:
            log.debug("dropping detail for trace_id=%s, selection moved on", trace_id)
            return None

        legend = service_legend(detail.spans, self.colors, self.palette)
        return TraceDetailView(
            trace_id=trace_id,
            state=detail.state,
            partial=detail.partial,
            error=detail.error,
            summary=self.summary(trace_id),
            timeline=build_timeline(detail.spans),
            legend=[ServiceColor(service=service, color=color) for service, color in legend],
        )
