"""
Enumerations for Span Status, Data Source Kinds and Trace Detail States

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class SpanStatus(str, Enum):
    ok = "ok"
    error = "error"

    @classmethod
    def coerce(cls, value: Any) -> SpanStatus:
        # anything that is not explicitly an error renders as ok
        if isinstance(value, SpanStatus):
            return value
        return cls.error if str(value if value is not None else "ok").strip().lower() == "error" else cls.ok


class DataSourceKind(str, Enum):
    logs = "logs"
    traces = "traces"
    metrics = "metrics"


class DetailState(str, Enum):
    uncached = "uncached"
    loading = "loading"
    cached = "cached"
    fallback = "fallback"
