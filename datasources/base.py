"""
Base contracts for the external collaborators the trace engine talks to

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from engine.enums import DataSourceKind
from engine.spans import Span


@dataclass(frozen=True)
class QueryResult:
    spans: List[Any] = field(default_factory=list)
    data_source: DataSourceKind = DataSourceKind.traces


class BaseConnector(ABC):
    def __init__(self, base_url: str, timeout: int = 30, headers: Optional[Dict[str, str]] = None):
        self.base_url = str(base_url).rstrip("/")
        self.timeout = timeout
        self.headers = headers or {}

    def _headers(self) -> Dict[str, str]:
        """Basic header set applied to every outbound request."""
        return {"Accept": "application/json", **self.headers}

    async def aclose(self) -> None:
        return None


class TraceDetailResource(BaseConnector):
    @abstractmethod
    async def get_trace_detail(self, trace_id: str, provider: str) -> List[Span]: ...


class QueryExecutor(ABC):
    @abstractmethod
    async def execute(
        self,
        query: str,
        start: int,
        end: int,
        provider: Optional[str] = None,
    ) -> QueryResult: ...
