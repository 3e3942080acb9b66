"""
Stable service colours: a rolling string hash mapped onto a fixed palette, with
the caller-owned cache keeping every service on the same colour for a session.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Dict, Iterable, List, MutableMapping, Optional, Sequence, Tuple

from engine.spans import Span
from config import FALLBACK_COLOR, settings


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def service_hash(service: str) -> int:
    # same arithmetic as the browser UI: shifts wrap to signed 32 bits and the
    # string is walked in UTF-16 code units
    data = service.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = unit + (_to_int32(_to_int32(h) << 5) - h)
    return h


def service_color(
    service: str,
    cache: MutableMapping[str, str],
    palette: Optional[Sequence[str]] = None,
) -> str:
    cached = cache.get(service)
    if cached:
        return cached

    colors = palette if palette is not None else settings.color_palette
    if not colors:
        color = FALLBACK_COLOR
    else:
        color = colors[abs(service_hash(service)) % len(colors)] or FALLBACK_COLOR
    cache[service] = color
    return color


def assign_colors(
    spans: Iterable[Span],
    cache: MutableMapping[str, str],
    palette: Optional[Sequence[str]] = None,
) -> Dict[str, str]:
    assigned: Dict[str, str] = {}
    for span in spans:
        if span.service and span.service not in assigned:
            assigned[span.service] = service_color(span.service, cache, palette)
    return assigned


def service_legend(
    spans: Iterable[Span],
    cache: MutableMapping[str, str],
    palette: Optional[Sequence[str]] = None,
) -> List[Tuple[str, str]]:
    legend: List[Tuple[str, str]] = []
    seen = set()
    for span in spans:
        if span.service in seen:
            continue
        seen.add(span.service)
        legend.append((span.service, service_color(span.service, cache, palette)))
    return legend
