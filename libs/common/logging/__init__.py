"""Centralized structured logging and trace propagation library.

This package provides structured JSON logging correlated with OpenTelemetry
traces, plus the HTTP plumbing (server middleware, traced client) that
carries trace context across service boundaries.

Usage:
    # At service startup
    from libs.common.logging import configure_logging
    configure_logging(service_name="cep-gateway", log_level="INFO")

    # In application setup
    from libs.common.logging import add_tracing_middleware, get_traced_client
    add_tracing_middleware(app, telemetry)
    client = get_traced_client(telemetry, timeout=30.0)

    # In request handlers
    logger = logging.getLogger(__name__)
    log_with_context(logger, "INFO", "Forwarding CEP", cep="01310100")
"""

from libs.common.logging.config import (
    configure_logging,
    log_with_context,
)
from libs.common.logging.context import (
    TRACE_ID_HEADER,
    format_span_id,
    format_trace_id,
    get_span_id,
    get_trace_id,
)
from libs.common.logging.formatter import JSONFormatter
from libs.common.logging.http_client import TracedHTTPXClient, get_traced_client
from libs.common.logging.middleware import TracingMiddleware, add_tracing_middleware

__all__ = [
    # Configuration
    "configure_logging",
    "log_with_context",
    # Trace ID access
    "TRACE_ID_HEADER",
    "format_span_id",
    "format_trace_id",
    "get_span_id",
    "get_trace_id",
    # Propagation
    "TracedHTTPXClient",
    "get_traced_client",
    "TracingMiddleware",
    "add_tracing_middleware",
    # Formatter (for advanced usage)
    "JSONFormatter",
]
