"""
Shared utilities and dependencies for API route modules.

Holds the process-wide registry of explorer sessions and the single detail
connector they share, so individual route files stay thin.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Dict, Optional

from config import settings
from datasources.base import TraceDetailResource
from datasources.factory import DataSourceFactory
from engine.explorer import ExplorerSession


class SessionNotFound(LookupError):
    pass


_detail_resource: Optional[TraceDetailResource] = None
_sessions: Dict[str, ExplorerSession] = {}


def get_detail_resource() -> TraceDetailResource:
    global _detail_resource
    if _detail_resource is None:
        _detail_resource = DataSourceFactory.create_detail_resource(settings)
    return _detail_resource


def get_session(session_id: str, create: bool = False) -> ExplorerSession:
    session = _sessions.get(session_id)
    if session is None:
        if not create:
            raise SessionNotFound(f"Unknown explorer session {session_id!r}")
        session = ExplorerSession(get_detail_resource(), palette=settings.color_palette)
        _sessions[session_id] = session
    return session


def drop_session(session_id: str) -> bool:
    return _sessions.pop(session_id, None) is not None


def session_count() -> int:
    return len(_sessions)


async def close_sessions() -> None:
    global _detail_resource
    _sessions.clear()
    resource, _detail_resource = _detail_resource, None
    if resource is not None:
        await resource.aclose()
