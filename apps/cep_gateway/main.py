"""
CEP Gateway FastAPI Application.

Public entry point: validates the CEP sent by the client, forwards it to the
Weather Service with the trace context attached, and relays the answer.

Key Features:
- POST /cep - Validate and forward a CEP
- GET /health - Health check (also checks the Weather Service)
- GET /metrics - Prometheus metrics

Environment Variables:
    WEATHER_SERVICE_URL: URL of Weather Service (default: http://weather-service:8081)
    OTEL_EXPORTER_OTLP_ENDPOINT: OTLP collector (default: otel-collector:4317)
    PORT: Listen port (default: 8080)
    LOG_LEVEL: Logging level (default: INFO)

Usage:
    $ cep-gateway
    $ python -m apps.cep_gateway.main
"""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import httpx
import uvicorn
from fastapi import APIRouter, FastAPI, Request, status
from fastapi.responses import Response
from prometheus_client import make_asgi_app
from pydantic import ValidationError

from apps.cep_gateway import __version__, metrics
from apps.cep_gateway.clients import WeatherServiceClient
from apps.cep_gateway.config import CepGatewaySettings, get_settings
from libs.common.exceptions import DownstreamUnavailableError, RequestConstructionError
from libs.common.http_errors import (
    MSG_INTERNAL_ERROR,
    MSG_SERVICE_UNAVAILABLE,
    error_response,
    install_error_handlers,
    invalid_zipcode_response,
)
from libs.common.logging import add_tracing_middleware, configure_logging, log_with_context
from libs.common.schemas import HealthResponse, PostalCodeRequest
from libs.common.tracing import Telemetry, configure_tracing, mark_span_error
from libs.common.validators import is_valid_cep

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/", tags=["Root"])
async def root(request: Request) -> dict[str, Any]:
    """Root endpoint."""
    settings: CepGatewaySettings = request.app.state.settings
    return {
        "service": settings.service_name,
        "version": __version__,
        "status": "running",
        "weather_service": settings.weather_service_url,
    }


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint.

    Reports "degraded" when the Weather Service does not answer its own
    health check; the gateway itself is still up and will answer 503.
    """
    settings: CepGatewaySettings = request.app.state.settings
    client: WeatherServiceClient = request.app.state.weather_service_client
    downstream_healthy = await client.health_check()

    return HealthResponse(
        status="healthy" if downstream_healthy else "degraded",
        service=settings.service_name,
        version=__version__,
        timestamp=datetime.now(UTC),
        details={
            "weather_service_url": settings.weather_service_url,
            "weather_service_healthy": downstream_healthy,
        },
    )


@router.post("/cep", tags=["CEP"])
async def handle_cep(request: Request) -> Response:
    """
    Validate a CEP and forward it to the Weather Service.

    Body: ``{"cep": "01310100"}``

    Returns:
        422 {"message": "invalid zipcode"} if the body or CEP is malformed,
        503 {"message": "service unavailable"} if the Weather Service cannot
        be reached, 500 {"message": "internal error"} if the outbound request
        cannot be built; otherwise the Weather Service's status and body,
        byte for byte
    """
    started = time.perf_counter()
    status_label = str(status.HTTP_500_INTERNAL_SERVER_ERROR)

    try:
        response = await _forward_cep(request)
        status_label = str(response.status_code)
        return response
    except Exception:
        logger.exception("Unhandled failure in handle_cep")
        raise
    finally:
        metrics.requests_total.labels(status=status_label).inc()
        metrics.request_duration.observe(time.perf_counter() - started)


async def _forward_cep(request: Request) -> Response:
    telemetry: Telemetry = request.app.state.telemetry
    client: WeatherServiceClient = request.app.state.weather_service_client

    with telemetry.tracer.start_as_current_span("handle-cep-request") as span:
        body = await request.body()
        try:
            payload = PostalCodeRequest.model_validate_json(body)
        except ValidationError:
            mark_span_error(span, "invalid json")
            return invalid_zipcode_response()

        span.set_attribute("cep", payload.cep)

        with telemetry.tracer.start_as_current_span("validate-cep") as validate_span:
            is_valid = is_valid_cep(payload.cep)
            validate_span.set_attribute("valid", is_valid)

        if not is_valid:
            mark_span_error(span, "invalid cep format")
            return invalid_zipcode_response()

        try:
            upstream = await client.forward(payload)
        except RequestConstructionError:
            mark_span_error(span, "failed to create request")
            metrics.forward_errors_total.labels(reason="construction").inc()
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, MSG_INTERNAL_ERROR)
        except DownstreamUnavailableError:
            mark_span_error(span, "weather service unavailable")
            metrics.forward_errors_total.labels(reason="unavailable").inc()
            return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, MSG_SERVICE_UNAVAILABLE)

        log_with_context(
            logger,
            "INFO",
            "Weather Service answered",
            cep=payload.cep,
            status_code=upstream.status_code,
        )
        return _relay(upstream)


def _relay(upstream: httpx.Response) -> Response:
    """Pass the downstream status and raw body through unchanged."""
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type="application/json",
    )


# ============================================================================
# Application Factory
# ============================================================================


def create_app(
    settings: CepGatewaySettings | None = None,
    telemetry: Telemetry | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Create the CEP Gateway application.

    Args:
        settings: Gateway settings (default: loaded from environment)
        telemetry: Tracing handle (default: no-op)
        transport: Optional httpx transport for the Weather Service client;
            tests pass httpx.ASGITransport to reach the Weather Service app
            in-process

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    telemetry = telemetry or Telemetry.noop(settings.service_name)

    weather_service_client = WeatherServiceClient(
        settings.weather_service_url,
        telemetry,
        timeout=settings.forward_timeout_seconds,
        transport=transport,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(f"Starting CEP Gateway (version={__version__})")
        logger.info(f"Weather Service: {settings.weather_service_url}")

        try:
            yield
        finally:
            logger.info("CEP Gateway shutting down")
            await weather_service_client.close()
            telemetry.shutdown(timeout_seconds=settings.shutdown_grace_seconds)

    app = FastAPI(
        title="CEP Gateway",
        description="Validates CEPs and forwards them to the Weather Service",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.telemetry = telemetry
    app.state.weather_service_client = weather_service_client

    install_error_handlers(app)
    add_tracing_middleware(app, telemetry)
    app.include_router(router)
    app.mount("/metrics", make_asgi_app())

    return app


def main() -> None:
    """Run the CEP Gateway under uvicorn until SIGINT/SIGTERM."""
    settings = get_settings()
    configure_logging(service_name=settings.service_name, log_level=settings.log_level)
    telemetry = configure_tracing(
        service_name=settings.service_name,
        otlp_endpoint=settings.otel_exporter_otlp_endpoint,
        service_version=__version__,
        enabled=settings.tracing_enabled,
    )

    uvicorn.run(
        create_app(settings=settings, telemetry=telemetry),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,
        timeout_graceful_shutdown=settings.shutdown_grace_seconds,
    )


if __name__ == "__main__":
    main()
