"""
Weather Service FastAPI Application.

Resolves a CEP to its city through ViaCEP, fetches the current temperature
from WeatherAPI and answers in Celsius, Fahrenheit and Kelvin.

Key Features:
- POST /weather - Resolve a CEP to the current temperature of its city
- GET /health - Health check
- GET /metrics - Prometheus metrics

Environment Variables:
    WEATHER_API_KEY: WeatherAPI key (required for successful answers)
    VIACEP_BASE_URL: ViaCEP base URL (default: https://viacep.com.br)
    WEATHER_API_BASE_URL: WeatherAPI base URL (default: https://api.weatherapi.com)
    OTEL_EXPORTER_OTLP_ENDPOINT: OTLP collector (default: otel-collector:4317)
    PORT: Listen port (default: 8081)
    LOG_LEVEL: Logging level (default: INFO)

Usage:
    $ weather-service
    $ python -m apps.weather_service.main
"""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import uvicorn
from fastapi import APIRouter, FastAPI, Request, status
from fastapi.responses import JSONResponse, Response
from prometheus_client import make_asgi_app
from pydantic import ValidationError

from apps.weather_service import __version__, metrics
from apps.weather_service.clients import ViaCEPClient, WeatherAPIClient
from apps.weather_service.config import WeatherServiceSettings, get_settings
from apps.weather_service.resolver import WeatherResolver
from libs.common.exceptions import (
    AddressLookupError,
    WeatherCredentialMissingError,
    WeatherLookupError,
    ZipcodeNotFoundError,
)
from libs.common.http_errors import (
    MSG_INTERNAL_ERROR,
    MSG_WEATHER_FAILED,
    MSG_ZIPCODE_NOT_FOUND,
    error_response,
    install_error_handlers,
    invalid_zipcode_response,
)
from libs.common.logging import add_tracing_middleware, configure_logging
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
    settings: WeatherServiceSettings = request.app.state.settings
    return {
        "service": settings.service_name,
        "version": __version__,
        "status": "running",
    }


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint.

    Reports "degraded" while WEATHER_API_KEY is unset: the service is up but
    every weather request will fail with 500.
    """
    settings: WeatherServiceSettings = request.app.state.settings
    weather_client: WeatherAPIClient = request.app.state.weather_client
    credential_configured = weather_client.has_credential

    return HealthResponse(
        status="healthy" if credential_configured else "degraded",
        service=settings.service_name,
        version=__version__,
        timestamp=datetime.now(UTC),
        details={
            "viacep_base_url": settings.viacep_base_url,
            "weather_api_base_url": settings.weather_api_base_url,
            "weather_api_key_configured": credential_configured,
        },
    )


@router.post("/weather", tags=["Weather"])
async def get_weather(request: Request) -> Response:
    """
    Resolve a CEP to the current temperature of its city.

    Body: ``{"cep": "01310100"}``

    Returns:
        200 {"city", "temp_C", "temp_F", "temp_K"} on success, otherwise
        {"message"} with 422 (invalid zipcode), 404 (can not find zipcode)
        or 500 (internal error / failed to get weather)
    """
    started = time.perf_counter()
    status_label = str(status.HTTP_500_INTERNAL_SERVER_ERROR)

    try:
        response = await _resolve_weather(request)
        status_label = str(response.status_code)
        return response
    except Exception:
        logger.exception("Unhandled failure in get_weather")
        raise
    finally:
        metrics.requests_total.labels(status=status_label).inc()
        metrics.request_duration.observe(time.perf_counter() - started)


async def _resolve_weather(request: Request) -> Response:
    telemetry: Telemetry = request.app.state.telemetry
    resolver: WeatherResolver = request.app.state.resolver

    with telemetry.tracer.start_as_current_span("handle-weather-request") as span:
        body = await request.body()
        try:
            payload = PostalCodeRequest.model_validate_json(body)
        except ValidationError:
            mark_span_error(span, "invalid json")
            return invalid_zipcode_response()

        span.set_attribute("cep", payload.cep)

        if not is_valid_cep(payload.cep):
            mark_span_error(span, "invalid cep format")
            return invalid_zipcode_response()

        try:
            result = await resolver.resolve(payload.cep)
        except AddressLookupError:
            mark_span_error(span, "cep lookup failed")
            metrics.upstream_errors_total.labels(upstream="viacep", reason="error").inc()
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, MSG_INTERNAL_ERROR)
        except ZipcodeNotFoundError:
            mark_span_error(span, "cep not found")
            metrics.upstream_errors_total.labels(upstream="viacep", reason="not_found").inc()
            return error_response(status.HTTP_404_NOT_FOUND, MSG_ZIPCODE_NOT_FOUND)
        except WeatherCredentialMissingError:
            mark_span_error(span, "weather lookup failed")
            metrics.upstream_errors_total.labels(
                upstream="weatherapi", reason="missing_credential"
            ).inc()
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, MSG_WEATHER_FAILED)
        except WeatherLookupError:
            mark_span_error(span, "weather lookup failed")
            metrics.upstream_errors_total.labels(upstream="weatherapi", reason="error").inc()
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, MSG_WEATHER_FAILED)

        span.set_attributes(
            {
                "city": result.city,
                "temp_c": result.temp_c,
                "temp_f": result.temp_f,
                "temp_k": result.temp_k,
            }
        )
        return JSONResponse(status_code=status.HTTP_200_OK, content=result.model_dump(by_alias=True))


# ============================================================================
# Application Factory
# ============================================================================


def create_app(
    settings: WeatherServiceSettings | None = None,
    telemetry: Telemetry | None = None,
) -> FastAPI:
    """
    Create the Weather Service application.

    Clients are built here rather than in the lifespan so the app also works
    when mounted behind transports that do not run lifespan events (e.g.
    httpx.ASGITransport in tests); the lifespan only closes them.

    Args:
        settings: Service settings (default: loaded from environment)
        telemetry: Tracing handle (default: no-op)

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    telemetry = telemetry or Telemetry.noop(settings.service_name)

    address_client = ViaCEPClient(
        settings.viacep_base_url, telemetry, timeout=settings.lookup_timeout_seconds
    )
    weather_client = WeatherAPIClient(
        settings.weather_api_base_url,
        settings.weather_api_key,
        telemetry,
        timeout=settings.weather_timeout_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(f"Starting Weather Service (version={__version__})")
        logger.info(f"ViaCEP: {settings.viacep_base_url}")
        logger.info(f"WeatherAPI: {settings.weather_api_base_url}")
        if not weather_client.has_credential:
            logger.warning("WEATHER_API_KEY not set - weather requests will fail with 500")

        try:
            yield
        finally:
            logger.info("Weather Service shutting down")
            await address_client.close()
            await weather_client.close()
            telemetry.shutdown(timeout_seconds=settings.shutdown_grace_seconds)

    app = FastAPI(
        title="Weather Service",
        description="Resolves a CEP to the current temperature of its city",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.telemetry = telemetry
    app.state.address_client = address_client
    app.state.weather_client = weather_client
    app.state.resolver = WeatherResolver(address_client, weather_client)

    install_error_handlers(app)
    add_tracing_middleware(app, telemetry)
    app.include_router(router)
    app.mount("/metrics", make_asgi_app())

    return app


def main() -> None:
    """Run the Weather Service under uvicorn until SIGINT/SIGTERM."""
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
