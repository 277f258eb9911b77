"""Centralized logging configuration for all services.

This module provides standardized logging setup using structured JSON output
with trace correlation. Both services call configure_logging() once at
startup so their log lines share one schema and can be joined with the
distributed trace of the request that produced them.

Example:
    >>> from libs.common.logging.config import configure_logging
    >>> logger = configure_logging(service_name="weather-service", log_level="INFO")
    >>> logger.info("Service started", extra={"context": {"port": 8081}})
"""

import logging
import sys

from libs.common.logging.context import get_span_id, get_trace_id
from libs.common.logging.formatter import JSONFormatter

# Third-party loggers that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


class TraceIDFilter(logging.Filter):
    """Logging filter that adds trace and span IDs to log records.

    Reads the active OpenTelemetry span at emit time and stamps its
    identifiers on the record so they appear in the formatted output.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Add trace_id and span_id to the log record.

        Args:
            record: The log record to filter

        Returns:
            True (always allows the record through)
        """
        record.trace_id = get_trace_id()
        record.span_id = get_span_id()
        return True


def configure_logging(
    service_name: str,
    log_level: str = "INFO",
    include_context: bool = True,
) -> logging.Logger:
    """Configure structured JSON logging for a service.

    Sets up the root logger with:
    - JSON formatted output to stdout
    - Trace/span ID injection on all records
    - Specified log level
    - httpx/httpcore request chatter capped at WARNING

    Args:
        service_name: Name of the service (e.g., "cep-gateway")
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        include_context: Whether to include context dict in output

    Returns:
        Configured root logger instance

    Raises:
        ValueError: If log_level is invalid
    """
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter(service_name=service_name, include_context=include_context))
    handler.addFilter(TraceIDFilter())
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    return root_logger


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **context_fields: object,
) -> None:
    """Log a message with additional context fields.

    Context fields will appear in the "context" dict in JSON output.

    Example:
        >>> log_with_context(logger, "INFO", "CEP resolved", cep="01310100", city="São Paulo")
        # Output includes: "context": {"cep": "01310100", "city": "São Paulo"}
    """
    log_method = getattr(logger, level.lower())
    log_method(message, extra={"context": context_fields})
