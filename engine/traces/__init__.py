"""
Package for trace reconstruction: grouping spans into traces, waterfall layout,
service colours and lazily loaded trace details.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.traces.grouping import TraceFilter, filter_summaries, group_traces, sort_summaries
from engine.traces.timeline import build_timeline, compute_depths, format_duration, span_depth
from engine.traces.colors import assign_colors, service_color, service_legend
from engine.traces.detail import TraceDetail, TraceDetailCache

__all__ = [
    "TraceFilter", "filter_summaries", "group_traces", "sort_summaries",
    "build_timeline", "compute_depths", "format_duration", "span_depth",
    "assign_colors", "service_color", "service_legend",
    "TraceDetail", "TraceDetailCache",
]
