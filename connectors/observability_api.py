from typing import Any, Dict, List, Optional
from urllib.parse import quote

from datasources.base import TraceDetailResource
from datasources.exceptions import InvalidQuery
from datasources.helpers import fetch_json
from datasources.retry import retry
from engine.spans import Span, normalize_spans

TRACES_PATH = "/v1/observability/traces"


def encode_trace_id(trace_id: str) -> str:
    # base64 ids carry "/", "+" and "="; stray slashes at the edges would double up in the path
    cleaned = str(trace_id or "").strip("/")
    if not cleaned:
        raise InvalidQuery("Trace ID is required")
    return quote(cleaned, safe="")


class ObservabilityApiConnector(TraceDetailResource):
    def __init__(
        self,
        base_url: str,
        timeout: int = 30,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(base_url, timeout=timeout, headers=headers)

    def detail_url(self, trace_id: str) -> str:
        return f"{self.base_url}{TRACES_PATH}/{encode_trace_id(trace_id)}"

    @retry()
    async def get_trace_detail(self, trace_id: str, provider: str) -> List[Span]:
        payload: Any = await fetch_json(
            self.detail_url(trace_id),
            params={"provider": provider},
            headers=self._headers(),
            timeout=self.timeout,
            label="trace detail",
        )
        data = payload.get("data", payload) if isinstance(payload, dict) else {}
        spans = data.get("spans") if isinstance(data, dict) else None
        return normalize_spans(spans if isinstance(spans, list) else [])
