"""
Waterfall layout for a single trace: proportional offsets and widths inside the
trace window, and the parent-child indentation depth of every span.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import math
from typing import Dict, List, Optional, Sequence

import numpy as np

from api.responses import TimelineLayout, TimelineRow
from engine.spans import Span


def _first_by_id(spans: Sequence[Span]) -> Dict[str, int]:
    index: Dict[str, int] = {}
    for i, span in enumerate(spans):
        index.setdefault(span.id, i)
    return index


def compute_depths(spans: Sequence[Span]) -> List[int]:
    """Depth of every span in one pass over the set.

    Parents missing from ``spans`` make a span a root (depth 0). Spans sitting
    on a parent cycle get depth 0 and spans hanging below a cycle count from
    it, so malformed data never recurses without bound.
    """
    index = _first_by_id(spans)
    depths: List[Optional[int]] = [None] * len(spans)

    for i in range(len(spans)):
        if depths[i] is not None:
            continue

        chain: List[int] = []
        on_chain: Dict[int, int] = {}
        current = i
        while True:
            known = depths[current]
            if known is not None:
                base = known
                break
            if current in on_chain:
                start = on_chain[current]
                for member in chain[start:]:
                    depths[member] = 0
                del chain[start:]
                base = 0
                break
            on_chain[current] = len(chain)
            chain.append(current)

            parent_id = spans[current].parent_id
            parent = index.get(parent_id) if parent_id is not None else None
            if parent is None:
                depths[current] = 0
                chain.pop()
                base = 0
                break
            current = parent

        for member in reversed(chain):
            base += 1
            depths[member] = base

    return [d or 0 for d in depths]


def span_depth(span: Span, spans: Sequence[Span]) -> int:
    """Depth of one span, walking its parent chain inside ``spans``."""
    by_id: Dict[str, Span] = {}
    for candidate in spans:
        by_id.setdefault(candidate.id, candidate)
    canonical = by_id.get(span.id)
    if canonical is not None and canonical is not span and canonical == span:
        span = canonical

    positions: Dict[int, int] = {id(span): 0}
    current = span
    steps = 0
    # a chain longer than the set itself can only be a cycle
    while steps <= len(spans):
        parent = by_id.get(current.parent_id) if current.parent_id is not None else None
        if parent is None:
            return steps
        seen_at = positions.get(id(parent))
        if seen_at is not None:
            return seen_at
        steps += 1
        positions[id(parent)] = steps
        current = parent
    return 0


def format_duration(duration_ms: float) -> str:
    if duration_ms < 1000:
        return f"{math.floor(duration_ms + 0.5)}ms"
    return f"{duration_ms / 1000:.2f}s"


def build_timeline(spans: Sequence[Span]) -> TimelineLayout:
    if not spans:
        return TimelineLayout()

    ordered = sorted(spans, key=lambda s: s.start_time)
    starts = np.array([s.start_time for s in ordered], dtype=float)
    durations = np.array([s.duration for s in ordered], dtype=float)

    min_time = float(starts.min())
    max_time = float((starts + durations).max())
    total = max_time - min_time

    if total > 0:
        left = (starts - min_time) / total * 100.0
        width = durations / total * 100.0
    else:
        left = np.zeros_like(starts)
        width = np.zeros_like(durations)
    left = np.where(np.isfinite(left), left, 0.0)
    width = np.clip(np.where(np.isfinite(width), width, 0.0), 0.0, None)

    depths = compute_depths(ordered)
    rows = [
        TimelineRow(
            span=span,
            left_percent=float(left[i]),
            width_percent=float(width[i]),
            depth=depths[i],
            duration_label=format_duration(span.duration),
        )
        for i, span in enumerate(ordered)
    ]
    return TimelineLayout(
        min_time=min_time,
        max_time=max_time,
        total_duration=total,
        rows=rows,
    )
