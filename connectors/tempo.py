import base64
import binascii
import string
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import unquote

from datasources.base import TraceDetailResource
from datasources.exceptions import InvalidQuery
from datasources.helpers import fetch_json
from datasources.retry import retry
from engine.enums import SpanStatus
from engine.spans import Span

_HEX = set(string.hexdigits)


def trace_id_to_hex(trace_id: str) -> str:
    """Tempo addresses traces by hex id; the explorer may hand us base64."""
    decoded = unquote(str(trace_id or "")).strip()
    if not decoded:
        raise InvalidQuery("Trace ID is required")
    if all(c in _HEX for c in decoded):
        return decoded
    padded = decoded.rstrip("=")
    padded += "=" * (-len(padded) % 4)
    try:
        raw = base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidQuery(f"Trace ID {trace_id!r} is neither hex nor base64") from e
    return raw.hex()


def attribute_value(value: Optional[Dict[str, Any]]) -> Any:
    # presence, not truthiness: False, 0 and "" are real attribute values
    if not isinstance(value, dict):
        return None
    if "stringValue" in value:
        return value["stringValue"]
    if "intValue" in value:
        try:
            return int(value["intValue"])
        except (TypeError, ValueError):
            return value["intValue"]
    if "doubleValue" in value:
        try:
            return float(value["doubleValue"])
        except (TypeError, ValueError):
            return value["doubleValue"]
    if "boolValue" in value:
        return bool(value["boolValue"])
    if isinstance(value.get("arrayValue"), dict):
        return [attribute_value(v) for v in value["arrayValue"].get("values") or []]
    if isinstance(value.get("kvlistValue"), dict):
        return {
            kv.get("key", ""): attribute_value(kv.get("value"))
            for kv in value["kvlistValue"].get("values") or []
        }
    if "bytesValue" in value:
        return value["bytesValue"]
    return None



def _attributes(attrs: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    return {a.get("key", ""): attribute_value(a.get("value")) for a in attrs if isinstance(a, dict)}


def _nanos(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _status(raw: Any) -> SpanStatus:
    if not isinstance(raw, dict):
        return SpanStatus.ok
    code = raw.get("code")
    if code == 2 or str(code).upper() == "STATUS_CODE_ERROR":
        return SpanStatus.error
    return SpanStatus.ok


def _otlp_span(raw: Dict[str, Any], service: str, fallback_trace_id: str) -> Span:
    start_ns = _nanos(raw.get("startTimeUnixNano"))
    end_ns = _nanos(raw.get("endTimeUnixNano"))
    duration_ms = (end_ns - start_ns) / 1e6 if start_ns is not None and end_ns is not None else 0.0
    return Span(
        id=raw.get("spanId") or "",
        trace_id=raw.get("traceId") or fallback_trace_id,
        parent_id=raw.get("parentSpanId"),
        service=service,
        operation_name=raw.get("name") or "",
        start_time=start_ns / 1e6 if start_ns is not None else 0.0,
        duration=duration_ms,
        status=_status(raw.get("status")),
        tags=_attributes(raw.get("attributes") or []),
    )


def spans_from_otlp(payload: Any, trace_id: str = "") -> List[Span]:
    spans: List[Span] = []
    if not isinstance(payload, dict):
        return spans
    for batch in payload.get("batches") or []:
        if not isinstance(batch, dict):
            continue
        resource = _attributes((batch.get("resource") or {}).get("attributes") or [])
        service = str(resource.get("service.name") or "")
        # instrumentationLibrarySpans is the pre-1.0 OTLP name for scopeSpans
        scopes = list(batch.get("scopeSpans") or []) + list(batch.get("instrumentationLibrarySpans") or [])
        for scope in scopes:
            for raw in (scope or {}).get("spans") or []:
                if isinstance(raw, dict):
                    spans.append(_otlp_span(raw, service, trace_id))
    return spans


class TempoConnector(TraceDetailResource):
    def __init__(
        self,
        base_url: str,
        timeout: int = 30,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(base_url, timeout=timeout, headers=headers)

    @retry()
    async def get_trace_detail(self, trace_id: str, provider: str) -> List[Span]:
        hex_id = trace_id_to_hex(trace_id)
        payload = await fetch_json(
            f"{self.base_url}/api/traces/{hex_id}",
            headers=self._headers(),
            timeout=self.timeout,
            label="Tempo trace lookup",
        )
        return spans_from_otlp(payload, trace_id)
