"""
Explorer session routes. Each session owns its span batch, colour map and trace detail cache.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException

from api.requests import SessionBatchRequest
from api.responses import TraceDetailView, TraceSummary
from api.routes.common import drop_session, get_session
from api.routes.exception import handle_exceptions

router = APIRouter(tags=["Explorer"])


@router.put("/explorer/sessions/{session_id}/spans", response_model=List[TraceSummary])
@handle_exceptions
async def replace_spans(session_id: str, req: SessionBatchRequest) -> List[TraceSummary]:
    session = get_session(session_id, create=True)
    return session.replace_batch(req.spans, data_source=req.data_source, provider=req.provider)


@router.get("/explorer/sessions/{session_id}/traces", response_model=List[TraceSummary])
@handle_exceptions
async def list_traces(session_id: str) -> List[TraceSummary]:
    return get_session(session_id).summaries


@router.get("/explorer/sessions/{session_id}/traces/{trace_id:path}", response_model=TraceDetailView)
@handle_exceptions
async def trace_detail(session_id: str, trace_id: str, provider: Optional[str] = None) -> TraceDetailView:
    session = get_session(session_id)
    if provider:
        session.provider = provider
    view = await session.select(trace_id)
    if view is None:
        raise HTTPException(status_code=409, detail=f"Selection moved on from trace {trace_id!r}")
    return view


@router.delete("/explorer/sessions/{session_id}")
@handle_exceptions
async def delete_session(session_id: str) -> Dict[str, Any]:
    return {"session_id": session_id, "deleted": drop_session(session_id)}
