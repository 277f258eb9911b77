"""
Root conftest for tests.

Provides:
1. Tracing handles backed by an in-memory span exporter
2. Settings for both services pointing at fake collaborator hosts
3. A respx router mocking every outbound httpx call that goes through httpcore
   (TestClient and httpx.ASGITransport bypass it, so in-process hops are real)
4. A local socket server that answers one byte at a time
"""

import asyncio
from collections.abc import AsyncIterator, Callable, Iterator
from contextlib import asynccontextmanager

import pytest
import respx
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from apps.cep_gateway.config import CepGatewaySettings
from apps.weather_service.config import WeatherServiceSettings
from libs.common.tracing import Telemetry

VIACEP_BASE_URL = "https://viacep.test"
WEATHER_API_BASE_URL = "https://weatherapi.test"
WEATHER_SERVICE_URL = "http://weather-service.test"

TelemetryFactory = Callable[[str], tuple[Telemetry, InMemorySpanExporter]]


@pytest.fixture()
def make_telemetry() -> TelemetryFactory:
    """Build a Telemetry handle whose spans land in an in-memory exporter."""

    def _make(service_name: str) -> tuple[Telemetry, InMemorySpanExporter]:
        exporter = InMemorySpanExporter()
        provider = TracerProvider(resource=Resource.create({SERVICE_NAME: service_name}))
        provider.add_span_processor(SimpleSpanProcessor(exporter))
        return Telemetry(service_name, provider), exporter

    return _make


@pytest.fixture()
def weather_settings() -> WeatherServiceSettings:
    """Weather Service settings with a credential and fake collaborator hosts."""
    return WeatherServiceSettings(
        _env_file=None,
        viacep_base_url=VIACEP_BASE_URL,
        weather_api_base_url=WEATHER_API_BASE_URL,
        weather_api_key="test-key",
        tracing_enabled=False,
    )


@pytest.fixture()
def gateway_settings() -> CepGatewaySettings:
    """CEP Gateway settings pointing at a fake Weather Service host."""
    return CepGatewaySettings(
        _env_file=None,
        weather_service_url=WEATHER_SERVICE_URL,
        tracing_enabled=False,
    )


@pytest.fixture()
def mock_router() -> Iterator[respx.MockRouter]:
    """Mock outbound HTTP; routes a test declares need not all be called."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@asynccontextmanager
async def _slow_drip_server(
    interval: float = 0.3, body_size: int = 100
) -> AsyncIterator[str]:
    """Serve every request with valid headers, then one body byte per interval."""
    stop = asyncio.Event()

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            await reader.readuntil(b"\r\n\r\n")
            writer.write(
                b"HTTP/1.1 200 OK\r\n"
                b"Content-Type: application/json\r\n"
                + f"Content-Length: {body_size}\r\n\r\n".encode()
            )
            await writer.drain()
            for _ in range(body_size):
                if stop.is_set():
                    break
                writer.write(b" ")
                await writer.drain()
                try:
                    await asyncio.wait_for(stop.wait(), timeout=interval)
                except TimeoutError:
                    pass
        except (ConnectionError, asyncio.IncompleteReadError):
            pass
        finally:
            writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        stop.set()
        server.close()
        await server.wait_closed()


@pytest.fixture()
def slow_drip_server() -> Callable[..., AsyncIterator[str]]:
    """Factory for a local server whose body takes interval * body_size seconds."""
    return _slow_drip_server
