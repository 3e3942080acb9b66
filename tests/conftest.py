import os
import sys
import pytest

# ensure workspace root is on sys.path so our application packages can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from engine.spans import Span


@pytest.fixture
def make_span():
    def _make(span_id: str, trace_id: str = "t1", start: float = 0.0, duration: float = 10.0, **kwargs) -> Span:
        return Span(
            id=span_id,
            trace_id=trace_id,
            start_time=start,
            duration=duration,
            service=kwargs.pop("service", "api"),
            operation_name=kwargs.pop("operation_name", f"op-{span_id}"),
            **kwargs,
        )

    return _make


@pytest.fixture(autouse=True)
def clear_sessions():
    """Every test starts without explorer sessions or a cached detail connector."""
    import api.routes.common as common

    common._sessions.clear()
    common._detail_resource = None
    yield
    common._sessions.clear()
    common._detail_resource = None
