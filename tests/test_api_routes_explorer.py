"""
Tests for explorer session routes and the shared session registry.
"""

from __future__ import annotations

import pytest
from fastapi import HTTPException

from api.requests import SessionBatchRequest
from api.routes import common
from api.routes import explorer as explorer_route
from datasources.base import TraceDetailResource
from datasources.exceptions import DataSourceUnavailable
from engine.enums import DataSourceKind, DetailState
from engine.spans import Span

ROWS = [
    {"id": "a", "traceId": "t1", "service": "api", "operationName": "GET /", "startTime": 1000, "duration": 50},
    {"id": "b", "traceId": "t1", "parentId": "a", "service": "db", "startTime": 1010, "duration": 20},
]


class DummyResource(TraceDetailResource):
    def __init__(self, error=None):
        super().__init__("http://detail")
        self.error = error
        self.calls = []
        self.closed = False

    async def get_trace_detail(self, trace_id, provider):
        self.calls.append((trace_id, provider))
        if self.error is not None:
            raise self.error
        return [Span(id="a", trace_id=trace_id, service="api", start_time=1000, duration=50)]

    async def aclose(self):
        self.closed = True


@pytest.fixture
def resource(monkeypatch):
    res = DummyResource()
    monkeypatch.setattr(common, "_detail_resource", res)
    return res


@pytest.mark.asyncio
async def test_replace_and_list_traces(resource):
    rows = await explorer_route.replace_spans("s1", SessionBatchRequest(spans=ROWS, provider="tempo"))
    assert [s.trace_id for s in rows] == ["t1"]
    assert common.session_count() == 1
    listed = await explorer_route.list_traces("s1")
    assert listed[0].span_count == 2


@pytest.mark.asyncio
async def test_unknown_session_is_404(resource):
    with pytest.raises(HTTPException) as exc:
        await explorer_route.list_traces("nope")
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_sessions_are_isolated(resource):
    await explorer_route.replace_spans("s1", SessionBatchRequest(spans=ROWS))
    await explorer_route.replace_spans("s2", SessionBatchRequest(spans=[], data_source=DataSourceKind.metrics))
    assert len(await explorer_route.list_traces("s1")) == 1
    assert await explorer_route.list_traces("s2") == []


@pytest.mark.asyncio
async def test_trace_detail_uses_cache(resource):
    await explorer_route.replace_spans("s1", SessionBatchRequest(spans=ROWS, provider="tempo"))
    view = await explorer_route.trace_detail("s1", "t1")
    again = await explorer_route.trace_detail("s1", "t1")
    assert view.state == DetailState.cached
    assert again.timeline.rows[0].span.id == "a"
    assert resource.calls == [("t1", "tempo")]


@pytest.mark.asyncio
async def test_trace_detail_without_provider_is_400(resource):
    await explorer_route.replace_spans("s1", SessionBatchRequest(spans=ROWS))
    with pytest.raises(HTTPException) as exc:
        await explorer_route.trace_detail("s1", "t1")
    assert exc.value.status_code == 400
    assert resource.calls == []


@pytest.mark.asyncio
async def test_trace_detail_fallback_is_partial(monkeypatch):
    res = DummyResource(error=DataSourceUnavailable("down"))
    monkeypatch.setattr(common, "_detail_resource", res)
    await explorer_route.replace_spans("s1", SessionBatchRequest(spans=ROWS))
    view = await explorer_route.trace_detail("s1", "t1", provider="tempo")
    assert view.partial
    assert view.error == "down"
    assert [row.span.id for row in view.timeline.rows] == ["a", "b"]


@pytest.mark.asyncio
async def test_delete_session(resource):
    await explorer_route.replace_spans("s1", SessionBatchRequest(spans=ROWS))
    assert await explorer_route.delete_session("s1") == {"session_id": "s1", "deleted": True}
    assert await explorer_route.delete_session("s1") == {"session_id": "s1", "deleted": False}


@pytest.mark.asyncio
async def test_close_sessions_releases_connector(resource):
    await explorer_route.replace_spans("s1", SessionBatchRequest(spans=ROWS))
    await common.close_sessions()
    assert common.session_count() == 0
    assert resource.closed
