"""Tests for the tracing pipeline handle."""

from unittest.mock import MagicMock, patch

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import NoOpTracerProvider, StatusCode

from libs.common.tracing import Telemetry, configure_tracing, mark_span_error


class TestTelemetryPropagation:
    def test_inject_then_extract_continues_the_trace(self, make_telemetry) -> None:
        telemetry, _ = make_telemetry("cep-gateway")
        carrier: dict[str, str] = {}

        with telemetry.tracer.start_as_current_span("forward-to-weather-service") as span:
            telemetry.inject(carrier)
            sent = span.get_span_context()

        version, trace_id, span_id, flags = carrier["traceparent"].split("-")
        assert version == "00"
        assert trace_id == f"{sent.trace_id:032x}"
        assert span_id == f"{sent.span_id:016x}"
        assert int(flags, 16) & 0x01  # sampled

        receiver, exporter = make_telemetry("weather-service")
        with receiver.tracer.start_as_current_span(
            "weather-service-server", context=receiver.extract(carrier)
        ):
            pass

        (server_span,) = exporter.get_finished_spans()
        assert server_span.context.trace_id == sent.trace_id
        assert server_span.parent.span_id == sent.span_id

    def test_inject_outside_a_span_writes_nothing(self, make_telemetry) -> None:
        telemetry, _ = make_telemetry("cep-gateway")
        carrier: dict[str, str] = {}

        telemetry.inject(carrier)

        assert "traceparent" not in carrier

    def test_noop_handle_records_nothing(self) -> None:
        telemetry = Telemetry.noop("cep-gateway")
        carrier: dict[str, str] = {}

        with telemetry.tracer.start_as_current_span("handle-cep-request") as span:
            telemetry.inject(carrier)
            assert not span.is_recording()

        assert "traceparent" not in carrier
        assert isinstance(telemetry.tracer_provider, NoOpTracerProvider)


class TestTelemetryShutdown:
    def test_shutdown_flushes_then_shuts_down_once(self) -> None:
        provider = MagicMock(spec=TracerProvider)
        provider.force_flush.return_value = True
        telemetry = Telemetry("weather-service", provider)

        telemetry.shutdown(timeout_seconds=10)
        telemetry.shutdown(timeout_seconds=10)

        provider.force_flush.assert_called_once_with(timeout_millis=10_000)
        provider.shutdown.assert_called_once_with()

    def test_shutdown_still_completes_when_flush_times_out(self, caplog) -> None:
        provider = MagicMock(spec=TracerProvider)
        provider.force_flush.return_value = False
        telemetry = Telemetry("weather-service", provider)

        with caplog.at_level("WARNING", logger="libs.common.tracing"):
            telemetry.shutdown(timeout_seconds=2)

        provider.shutdown.assert_called_once_with()
        assert "did not finish" in caplog.text

    def test_noop_shutdown_is_harmless(self) -> None:
        telemetry = Telemetry.noop("cep-gateway")

        telemetry.shutdown()
        telemetry.shutdown()


class TestConfigureTracing:
    def test_disabled_returns_noop_handle(self) -> None:
        telemetry = configure_tracing("cep-gateway", "otel-collector:4317", enabled=False)

        assert isinstance(telemetry.tracer_provider, NoOpTracerProvider)
        assert telemetry.service_name == "cep-gateway"

    def test_enabled_builds_batched_otlp_pipeline(self) -> None:
        with patch("libs.common.tracing.OTLPSpanExporter") as exporter_cls:
            telemetry = configure_tracing(
                "weather-service", "otel-collector:4317", service_version="2.0.0"
            )

        exporter_cls.assert_called_once_with(endpoint="otel-collector:4317", insecure=True)
        provider = telemetry.tracer_provider
        assert isinstance(provider, TracerProvider)
        assert provider.resource.attributes["service.name"] == "weather-service"
        assert provider.resource.attributes["service.version"] == "2.0.0"
        # Drop the provider without exporting anything
        provider.shutdown()


class TestMarkSpanError:
    def test_sets_error_attribute_and_status(self, make_telemetry) -> None:
        telemetry, exporter = make_telemetry("cep-gateway")

        with telemetry.tracer.start_as_current_span("handle-cep-request") as span:
            mark_span_error(span, "invalid cep format")

        (finished,) = exporter.get_finished_spans()
        assert finished.attributes["error"] == "invalid cep format"
        assert finished.status.status_code == StatusCode.ERROR
        assert finished.status.description == "invalid cep format"


@pytest.mark.parametrize("timeout_seconds", [0.5, 10])
def test_flush_timeout_is_passed_in_milliseconds(timeout_seconds: float) -> None:
    provider = MagicMock(spec=TracerProvider)
    provider.force_flush.return_value = True

    Telemetry("cep-gateway", provider).shutdown(timeout_seconds=timeout_seconds)

    provider.force_flush.assert_called_once_with(timeout_millis=int(timeout_seconds * 1000))
