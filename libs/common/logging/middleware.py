"""ASGI middleware continuing the caller's trace for every HTTP request.

The middleware extracts the W3C trace context sent by the caller, opens a
SERVER span as its child, keeps that span current while the application
handles the request, and echoes the trace ID in the ``X-Trace-ID`` response
header.

Example:
    >>> from fastapi import FastAPI
    >>> from libs.common.logging.middleware import add_tracing_middleware
    >>>
    >>> app = FastAPI()
    >>> add_tracing_middleware(app, telemetry)
"""

from collections.abc import Iterable
from typing import Any, Callable

from fastapi import FastAPI
from opentelemetry.trace import SpanKind, Status, StatusCode
from starlette.types import ASGIApp

from libs.common.logging.context import TRACE_ID_HEADER, format_trace_id
from libs.common.tracing import Telemetry

DEFAULT_EXCLUDED_PATHS = ("/metrics",)


class TracingMiddleware:
    """Pure ASGI middleware for server-side trace continuation.

    Works below BaseHTTPMiddleware so the span stays current inside the
    endpoint (same task) and the header is added even on error responses
    produced by exception handlers.

    Args:
        app: ASGI application to wrap
        telemetry: Tracing handle
        excluded_paths: Path prefixes that are not traced (metrics scrapes, health checks)
    """

    def __init__(
        self,
        app: ASGIApp,
        telemetry: Telemetry,
        excluded_paths: Iterable[str] = DEFAULT_EXCLUDED_PATHS,
    ) -> None:
        self.app = app
        self.telemetry = telemetry
        self.excluded_paths = tuple(excluded_paths)

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http" or scope.get("path", "").startswith(self.excluded_paths):
            await self.app(scope, receive, send)
            return

        carrier = {
            key.decode("latin-1"): value.decode("latin-1")
            for key, value in scope.get("headers", [])
        }
        parent_context = self.telemetry.extract(carrier)
        method = scope.get("method", "")

        with self.telemetry.tracer.start_as_current_span(
            f"{self.telemetry.service_name}-server",
            context=parent_context,
            kind=SpanKind.SERVER,
            attributes={"http.method": method, "http.target": scope.get("path", "")},
        ) as span:
            span_context = span.get_span_context()
            trace_id = format_trace_id(span_context.trace_id) if span_context.is_valid else None

            async def send_with_trace_id(message: dict[str, Any]) -> None:
                if message["type"] == "http.response.start":
                    status_code = message["status"]
                    span.set_attribute("http.status_code", status_code)
                    if status_code >= 500:
                        span.set_status(Status(StatusCode.ERROR, f"HTTP {status_code}"))
                    if trace_id:
                        headers = list(message.get("headers", []))
                        headers.append((TRACE_ID_HEADER.lower().encode(), trace_id.encode()))
                        message["headers"] = headers

                await send(message)

            await self.app(scope, receive, send_with_trace_id)

            route = scope.get("route")
            if route is not None:
                span.set_attribute("http.route", getattr(route, "path", str(route)))


def add_tracing_middleware(
    app: FastAPI,
    telemetry: Telemetry,
    excluded_paths: Iterable[str] = DEFAULT_EXCLUDED_PATHS,
) -> None:
    """Add TracingMiddleware to a FastAPI application.

    Should be called during application setup.

    Args:
        app: FastAPI application instance
        telemetry: Tracing handle for this service
        excluded_paths: Path prefixes that are not traced
    """
    app.add_middleware(TracingMiddleware, telemetry=telemetry, excluded_paths=excluded_paths)
