"""Trace ID access for log correlation.

Trace context lives in the OpenTelemetry context (itself backed by
contextvars, so it follows each request's asyncio task). This module reads
the identifiers of the active span in the hex form trace viewers display, so
that log lines can be joined with the trace they belong to.

Example:
    >>> from libs.common.logging.context import get_trace_id
    >>> with tracer.start_as_current_span("handle-cep-request"):
    ...     get_trace_id()
    '4bf92f3577b34da6a3ce929d0e0e4736'
"""

from opentelemetry import trace

# Response header echoing the trace ID so callers can look the request up
TRACE_ID_HEADER = "X-Trace-ID"


def format_trace_id(trace_id: int) -> str:
    """Render a 128-bit trace ID as 32 lowercase hex characters."""
    return trace.format_trace_id(trace_id)


def format_span_id(span_id: int) -> str:
    """Render a 64-bit span ID as 16 lowercase hex characters."""
    return trace.format_span_id(span_id)


def get_trace_id() -> str | None:
    """Get the trace ID of the active span.

    Returns:
        32-char hex trace ID, or None when no valid span is active
        (outside a request, or with tracing disabled)
    """
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return format_trace_id(span_context.trace_id)


def get_span_id() -> str | None:
    """Get the span ID of the active span, or None when no valid span is active."""
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return format_span_id(span_context.span_id)
