"""
Shared helper functions for data source connectors.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from datasources.exceptions import DataSourceUnavailable, InvalidQuery, QueryTimeout

log = logging.getLogger(__name__)


async def fetch_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: int = 30,
    label: str = "request",
) -> Any:
    log.debug("GET %s params=%s", url, params)
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.get(url, params=params, headers=headers)
            resp.raise_for_status()
            return resp.json()
    except httpx.HTTPStatusError as e:
        raise InvalidQuery(f"{label} failed [{e.response.status_code}]: {e.response.text}") from e
    except httpx.TimeoutException as e:
        raise QueryTimeout(f"{label} timed out") from e
    except httpx.RequestError as e:
        raise DataSourceUnavailable(f"Cannot reach {label} backend at {url}") from e
    except ValueError as e:
        raise InvalidQuery(f"{label} returned a non-JSON body") from e
