"""HTTP client with automatic trace context propagation.

Every request sent through TracedHTTPXClient is wrapped in a CLIENT span and
carries the W3C trace context (``traceparent``/``tracestate``/``baggage``)
plus the ``X-Trace-ID`` correlation header, so the callee continues the same
trace whichever process or task handles it.

Example:
    >>> async with get_traced_client(telemetry, timeout=10.0) as client:
    ...     response = await client.get("https://viacep.com.br/ws/01310100/json/")
    ...     # Request includes traceparent and X-Trace-ID headers automatically
"""

import asyncio
from typing import Any

import httpx
from opentelemetry.trace import SpanKind, Status, StatusCode

from libs.common.logging.context import TRACE_ID_HEADER, get_trace_id
from libs.common.tracing import Telemetry


class TracedHTTPXClient(httpx.AsyncClient):
    """Async HTTP client that traces and propagates context on every request.

    Hooks ``send`` rather than ``request`` so that requests built with
    ``build_request()`` and sent later are covered too.

    Args:
        telemetry: Tracing handle used to open spans and inject headers
        deadline: Total time in seconds allowed per request, from issuance
            until the body is fully read (None: only httpx's per-operation
            timeouts apply)
        **kwargs: Passed through to httpx.AsyncClient
    """

    def __init__(self, telemetry: Telemetry, deadline: float | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.telemetry = telemetry
        self.deadline = deadline

    async def send(self, request: httpx.Request, **kwargs: Any) -> httpx.Response:
        """Send a request inside a CLIENT span with trace headers injected.

        Args:
            request: Prepared HTTP request
            **kwargs: Additional send parameters

        Returns:
            HTTP response

        Raises:
            httpx.TimeoutException: The deadline passed before the response
                was fully read
            httpx.TransportError: Propagated unchanged; the span records it
        """
        span_name = f"HTTP {request.method}"
        with self.telemetry.tracer.start_as_current_span(
            span_name,
            kind=SpanKind.CLIENT,
            attributes={
                "http.method": request.method,
                "http.url": _redacted_url(request.url),
            },
        ) as span:
            self.telemetry.inject(request.headers)

            trace_id = get_trace_id()
            if trace_id:
                request.headers[TRACE_ID_HEADER] = trace_id

            try:
                async with asyncio.timeout(self.deadline):
                    response = await super().send(request, **kwargs)
            except TimeoutError as e:
                raise httpx.TimeoutException(
                    f"Request exceeded its {self.deadline}s deadline", request=request
                ) from e

            span.set_attribute("http.status_code", response.status_code)
            if response.status_code >= 400:
                span.set_status(Status(StatusCode.ERROR, f"HTTP {response.status_code}"))
            return response


def _redacted_url(url: httpx.URL) -> str:
    """Drop the query string so credentials passed as parameters never reach spans."""
    return f"{url.scheme}://{url.netloc.decode('ascii')}{url.path}"


def get_traced_client(
    telemetry: Telemetry,
    timeout: float = 10.0,
    **kwargs: Any,
) -> TracedHTTPXClient:
    """Create a traced async HTTP client.

    Args:
        telemetry: Tracing handle
        timeout: Seconds allowed per outbound call, counted from issuance
            until the body is read; also used as httpx's per-operation limit
        **kwargs: Additional httpx.AsyncClient parameters (e.g. transport)

    Returns:
        Configured TracedHTTPXClient instance
    """
    return TracedHTTPXClient(telemetry, deadline=timeout, timeout=timeout, **kwargs)
