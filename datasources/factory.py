"""
Factory for creating the trace detail connector based on configuration.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from connectors.observability_api import ObservabilityApiConnector
from connectors.tempo import TempoConnector
from datasources.base import TraceDetailResource


class DataSourceFactory:

    @staticmethod
    def create_detail_resource(config) -> TraceDetailResource:
        from config import DETAIL_BACKEND_API, DETAIL_BACKEND_TEMPO

        if config.detail_backend == DETAIL_BACKEND_API:
            return ObservabilityApiConnector(config.api_url, timeout=config.connector_timeout)
        if config.detail_backend == DETAIL_BACKEND_TEMPO:
            return TempoConnector(config.tempo_url, timeout=config.connector_timeout)
        raise ValueError("Unsupported detail backend")
