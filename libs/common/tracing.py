"""Distributed tracing pipeline built on OpenTelemetry.

The tracing pipeline is process-wide plumbing: it is built once at service
startup, handed explicitly to the application factory and the HTTP clients,
and flushed once at shutdown. Nothing here touches the global OpenTelemetry
tracer provider, so tests can inject ``Telemetry.noop()`` or a provider with
an in-memory exporter without a collector.

Example:
    >>> telemetry = configure_tracing(
    ...     service_name="cep-gateway",
    ...     otlp_endpoint="otel-collector:4317",
    ... )
    >>> with telemetry.tracer.start_as_current_span("validate-cep"):
    ...     ...
    >>> telemetry.shutdown(timeout_seconds=10)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping

from opentelemetry import trace
from opentelemetry.baggage.propagation import W3CBaggagePropagator
from opentelemetry.context import Context
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.propagators.textmap import TextMapPropagator
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Span, Status, StatusCode
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_VERSION = "1.0.0"


def default_propagator() -> TextMapPropagator:
    """W3C trace context plus baggage, the format both services speak."""
    return CompositePropagator([TraceContextTextMapPropagator(), W3CBaggagePropagator()])


class Telemetry:
    """
    Handle on a tracer provider and the propagator used with it.

    Carries everything request-handling code needs for tracing: a tracer to
    open spans, inject/extract for crossing process boundaries, and shutdown
    for draining the exporter.

    Args:
        service_name: Service name used for the tracer and server span names
        tracer_provider: SDK provider (real or in-memory) or the API no-op provider
        propagator: Text map propagator (default: W3C trace context + baggage)
        service_version: Instrumentation version reported with the tracer
    """

    def __init__(
        self,
        service_name: str,
        tracer_provider: trace.TracerProvider,
        propagator: TextMapPropagator | None = None,
        service_version: str = DEFAULT_SERVICE_VERSION,
    ) -> None:
        self.service_name = service_name
        self.tracer_provider = tracer_provider
        self.propagator = propagator or default_propagator()
        self.tracer = tracer_provider.get_tracer(service_name, service_version)
        self._shut_down = False

    @classmethod
    def noop(cls, service_name: str) -> Telemetry:
        """Create a handle whose spans are never recorded nor exported."""
        return cls(service_name, trace.NoOpTracerProvider())

    def inject(self, carrier: MutableMapping[str, str], context: Context | None = None) -> None:
        """Write the current (or given) trace context into outgoing headers."""
        self.propagator.inject(carrier, context=context)

    def extract(self, carrier: Mapping[str, str]) -> Context:
        """Read a trace context from incoming headers."""
        return self.propagator.extract(carrier)

    def shutdown(self, timeout_seconds: float = 10.0) -> None:
        """
        Flush pending spans and shut the provider down.

        Safe to call more than once; only the first call has an effect.

        Args:
            timeout_seconds: Grace period for exporting in-flight spans
        """
        if self._shut_down:
            return
        self._shut_down = True

        if not isinstance(self.tracer_provider, TracerProvider):
            return

        flushed = self.tracer_provider.force_flush(timeout_millis=int(timeout_seconds * 1000))
        if not flushed:
            logger.warning(
                "Span export did not finish within grace period",
                extra={"context": {"timeout_seconds": timeout_seconds}},
            )
        self.tracer_provider.shutdown()
        logger.info(f"Tracer provider for {self.service_name} shut down")


def configure_tracing(
    service_name: str,
    otlp_endpoint: str,
    service_version: str = DEFAULT_SERVICE_VERSION,
    enabled: bool = True,
    insecure: bool = True,
) -> Telemetry:
    """
    Build the OTLP tracing pipeline for a service.

    Spans are batched and exported over gRPC to the collector. The exporter
    connects lazily, so an unreachable collector does not prevent startup.

    Args:
        service_name: Reported as the ``service.name`` resource attribute
        otlp_endpoint: Collector address, e.g. "otel-collector:4317"
        service_version: Reported as the ``service.version`` resource attribute
        enabled: If False, return a no-op handle instead
        insecure: Use a plaintext gRPC channel (collector inside the cluster)

    Returns:
        Telemetry handle owning the new tracer provider
    """
    if not enabled:
        logger.info("Tracing disabled, using no-op tracer provider")
        return Telemetry.noop(service_name)

    resource = Resource.create({SERVICE_NAME: service_name, SERVICE_VERSION: service_version})
    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(endpoint=otlp_endpoint, insecure=insecure)
    provider.add_span_processor(BatchSpanProcessor(exporter))

    logger.info(
        f"Tracing configured for {service_name}",
        extra={"context": {"otlp_endpoint": otlp_endpoint, "service_version": service_version}},
    )
    return Telemetry(service_name, provider, service_version=service_version)


def mark_span_error(span: Span, reason: str) -> None:
    """Tag a span as failed with a short human-readable reason."""
    span.set_attribute("error", reason)
    span.set_status(Status(StatusCode.ERROR, reason))
