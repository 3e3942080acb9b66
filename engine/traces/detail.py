"""
Lazy loading of full trace details with an in-memory cache, per-trace
deduplication of in-flight fetches, and fallback to the summary-level spans when
a fetch fails.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from datasources.base import TraceDetailResource
from datasources.exceptions import MissingProvider
from engine.enums import DetailState
from engine.spans import Span

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraceDetail:
    trace_id: str
    spans: List[Span] = field(default_factory=list)
    state: DetailState = DetailState.cached
    error: Optional[str] = None

    @property
    def partial(self) -> bool:
        return self.state == DetailState.fallback


class TraceDetailCache:
    """Per-session store of authoritative span sets keyed by trace id.

    ``load`` moves a trace from uncached through loading to cached. A failed
    fetch yields the caller's fallback spans without caching them, so the next
    selection tries the backend again. At most one fetch per trace id is in
    flight at any time; concurrent callers await the same task.
    """

    def __init__(self, resource: TraceDetailResource) -> None:
        self._resource = resource
        self._cached: Dict[str, List[Span]] = {}
        self._pending: Dict[str, asyncio.Task] = {}
        self._generation = 0

    def state(self, trace_id: str) -> DetailState:
        if trace_id in self._cached:
            return DetailState.cached
        if trace_id in self._pending:
            return DetailState.loading
        return DetailState.uncached

    def get(self, trace_id: str) -> Optional[List[Span]]:
        return self._cached.get(trace_id)

    def __contains__(self, trace_id: object) -> bool:
        return trace_id in self._cached

    def __len__(self) -> int:
        return len(self._cached)

    def clear(self) -> None:
        # in-flight fetches keep running but can no longer write into the cache
        self._generation += 1
        self._cached.clear()
        self._pending.clear()

    async def _fetch(self, trace_id: str, provider: str, generation: int) -> List[Span]:
        try:
            spans = list(await self._resource.get_trace_detail(trace_id, provider))
            if generation == self._generation:
                self._cached[trace_id] = spans
            log.info("trace detail loaded trace_id=%s provider=%s spans=%d", trace_id, provider, len(spans))
            return spans
        finally:
            if generation == self._generation and self._pending.get(trace_id) is asyncio.current_task():
                del self._pending[trace_id]

    async def load(
        self,
        trace_id: str,
        provider: Optional[str],
        fallback: Sequence[Span] = (),
    ) -> TraceDetail:
        if not provider:
            raise MissingProvider("provider is required to fetch trace details")

        cached = self._cached.get(trace_id)
        if cached is not None:
            log.debug("trace detail cache hit trace_id=%s", trace_id)
            return TraceDetail(trace_id=trace_id, spans=cached)

        task = self._pending.get(trace_id)
        if task is None:
            task = asyncio.create_task(self._fetch(trace_id, provider, self._generation))
            self._pending[trace_id] = task
        else:
            log.debug("joining in-flight trace detail fetch trace_id=%s", trace_id)

        try:
            spans = await asyncio.shield(task)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log.warning(
                "trace detail fetch failed trace_id=%s provider=%s: %s; using %d summary spans",
                trace_id, provider, exc, len(fallback),
            )
            return TraceDetail(
                trace_id=trace_id,
                spans=list(fallback),
                state=DetailState.fallback,
                error=str(exc) or exc.__class__.__name__,
            )
        return TraceDetail(trace_id=trace_id, spans=spans)
