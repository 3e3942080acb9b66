"""
Health check route reporting the configured detail backend and live sessions.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from fastapi import APIRouter

from api.responses import HealthStatus
from api.routes.common import session_count
from api.routes.exception import handle_exceptions
from config import settings

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthStatus)
@handle_exceptions
async def health() -> HealthStatus:
    return HealthStatus(
        status="ok",
        detail_backend=settings.detail_backend,
        sessions=session_count(),
    )
