"""Tests for the ASGI tracing middleware.

Tests verify:
- A SERVER span is opened for each request and made current in the endpoint
- An incoming ``traceparent`` is continued rather than replaced
- The trace ID is echoed in the X-Trace-ID response header
- Excluded paths are not traced
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from opentelemetry.trace import SpanKind, StatusCode

from libs.common.logging.context import TRACE_ID_HEADER, get_trace_id
from libs.common.logging.middleware import add_tracing_middleware

INCOMING_TRACE_ID = "4bf92f3577b34da6a3ce929d0e0e4736"
INCOMING_SPAN_ID = "00f067aa0ba902b7"
TRACEPARENT = f"00-{INCOMING_TRACE_ID}-{INCOMING_SPAN_ID}-01"


@pytest.fixture()
def traced_app(make_telemetry):
    telemetry, exporter = make_telemetry("cep-gateway")
    app = FastAPI()

    @app.get("/echo")
    async def echo() -> dict:
        return {"trace_id": get_trace_id()}

    @app.get("/boom")
    async def boom() -> dict:
        raise RuntimeError("boom")

    @app.get("/metrics")
    async def metrics() -> dict:
        return {"trace_id": get_trace_id()}

    add_tracing_middleware(app, telemetry)
    return app, exporter


class TestTracingMiddleware:
    """Test suite for TracingMiddleware."""

    def test_starts_server_span_and_echoes_trace_id(self, traced_app) -> None:
        app, exporter = traced_app

        response = TestClient(app).get("/echo")

        assert response.status_code == 200
        trace_id = response.json()["trace_id"]
        assert len(trace_id) == 32
        assert response.headers[TRACE_ID_HEADER] == trace_id

        (span,) = exporter.get_finished_spans()
        assert span.name == "cep-gateway-server"
        assert span.kind == SpanKind.SERVER
        assert span.attributes["http.method"] == "GET"
        assert span.attributes["http.target"] == "/echo"
        assert span.attributes["http.status_code"] == 200

    def test_continues_incoming_trace(self, traced_app) -> None:
        app, exporter = traced_app

        response = TestClient(app).get("/echo", headers={"traceparent": TRACEPARENT})

        assert response.json()["trace_id"] == INCOMING_TRACE_ID
        assert response.headers[TRACE_ID_HEADER] == INCOMING_TRACE_ID

        (span,) = exporter.get_finished_spans()
        assert span.parent is not None
        assert span.parent.is_remote
        assert f"{span.parent.span_id:016x}" == INCOMING_SPAN_ID

    def test_malformed_traceparent_starts_new_trace(self, traced_app) -> None:
        app, exporter = traced_app

        response = TestClient(app).get("/echo", headers={"traceparent": "garbage"})

        assert response.status_code == 200
        assert response.json()["trace_id"] != INCOMING_TRACE_ID
        (span,) = exporter.get_finished_spans()
        assert span.parent is None

    def test_server_error_marks_span(self, traced_app) -> None:
        app, exporter = traced_app

        response = TestClient(app, raise_server_exceptions=False).get("/boom")

        assert response.status_code == 500
        (span,) = exporter.get_finished_spans()
        assert span.status.status_code == StatusCode.ERROR

    def test_excluded_path_is_not_traced(self, traced_app) -> None:
        app, exporter = traced_app

        response = TestClient(app).get("/metrics")

        assert response.status_code == 200
        assert response.json()["trace_id"] is None
        assert TRACE_ID_HEADER not in response.headers
        assert exporter.get_finished_spans() == ()

    def test_noop_telemetry_adds_no_header(self) -> None:
        from libs.common.tracing import Telemetry

        app = FastAPI()

        @app.get("/echo")
        async def echo() -> dict:
            return {"trace_id": get_trace_id()}

        add_tracing_middleware(app, Telemetry.noop("cep-gateway"))

        response = TestClient(app).get("/echo")

        assert response.status_code == 200
        assert response.json()["trace_id"] is None
        assert TRACE_ID_HEADER not in response.headers
