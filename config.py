"""
Constants and configuration for Span View.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import os
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings


DETAIL_BACKEND_API = "api"
DETAIL_BACKEND_TEMPO = "tempo"

SPANVIEW_DETAIL_BACKEND = os.getenv("SPANVIEW_DETAIL_BACKEND", DETAIL_BACKEND_API).lower()
SPANVIEW_API_URL = os.getenv("SPANVIEW_API_URL", "http://localhost:8080/api").rstrip("/")
SPANVIEW_TEMPO_URL = os.getenv("SPANVIEW_TEMPO_URL", "http://tempo:3200").rstrip("/")

SPANVIEW_CONNECTOR_TIMEOUT = int(os.getenv("SPANVIEW_CONNECTOR_TIMEOUT", "30"))
SPANVIEW_LOG_LEVEL = os.getenv("SPANVIEW_LOG_LEVEL", "INFO").upper()

# service colours, in the order the explorer UI has always used them
COLOR_PALETTE: List[str] = [
    "#8884d8",
    "#82ca9d",
    "#ffc658",
    "#ff7300",
    "#0088fe",
    "#00c49f",
    "#ff6b6b",
    "#4ecdc4",
    "#45b7d1",
    "#f7b731",
    "#5f27cd",
    "#00d2d3",
    "#ff9ff3",
    "#54a0ff",
    "#5f27cd",
    "#c44569",
]
FALLBACK_COLOR = "#8884d8"

UNKNOWN_OPERATION = "Unknown"
UNKNOWN_SERVICE = "unknown"


class Settings(BaseSettings):
    detail_backend: str = SPANVIEW_DETAIL_BACKEND
    api_url: str = SPANVIEW_API_URL
    tempo_url: str = SPANVIEW_TEMPO_URL

    connector_timeout: int = SPANVIEW_CONNECTOR_TIMEOUT

    # transient detail-fetch failures (timeouts, unreachable backend) are retried
    detail_retry_attempts: int = 2
    detail_retry_delay: float = 0.25
    detail_retry_backoff: float = 2.0

    color_palette: List[str] = list(COLOR_PALETTE)
    unknown_operation: str = UNKNOWN_OPERATION

    # magnitude cutoffs used to guess the unit of numeric backend timestamps
    start_time_ns_threshold: float = 1e17
    start_time_us_threshold: float = 1e14
    duration_ns_threshold: float = 1e9
    duration_us_threshold: float = 1e6

    host: str = "0.0.0.0"
    port: int = 4322
    log_level: str = SPANVIEW_LOG_LEVEL

    @field_validator("api_url", "tempo_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return str(v).rstrip("/")

    @field_validator("detail_backend", mode="before")
    @classmethod
    def validate_detail_backend(cls, v: str) -> str:
        value = str(v or "").strip().lower()
        if value not in {DETAIL_BACKEND_API, DETAIL_BACKEND_TEMPO}:
            raise ValueError(f"Unsupported detail backend: {value!r}")
        return value

    model_config = {
        "env_prefix": "SPANVIEW_",
        "extra": "ignore",
    }


settings = Settings()
