"""
HTTP clients for the Weather Service's external collaborators.

Provides typed interfaces to ViaCEP (address lookup) and WeatherAPI
(current conditions). Each call runs in its own span, carries the trace
context through TracedHTTPXClient, and is bounded by its own timeout.
No retries: a single failed attempt is terminal for the request.
"""

import logging

import httpx
from pydantic import SecretStr, ValidationError

from apps.weather_service.schemas import AddressLookupResult, ViaCEPResponse, WeatherAPIResponse
from libs.common.exceptions import (
    AddressLookupError,
    WeatherCredentialMissingError,
    WeatherLookupError,
)
from libs.common.logging import get_traced_client
from libs.common.tracing import Telemetry, mark_span_error

logger = logging.getLogger(__name__)


# ==============================================================================
# ViaCEP Client
# ==============================================================================


class ViaCEPClient:
    """
    HTTP client for the ViaCEP address lookup API.

    Example:
        >>> client = ViaCEPClient("https://viacep.com.br", telemetry)
        >>> result = await client.lookup("01310100")
        >>> print(result.city)
        'São Paulo'
    """

    def __init__(self, base_url: str, telemetry: Telemetry, timeout: float = 10.0):
        """
        Initialize ViaCEP client.

        Args:
            base_url: Base URL of ViaCEP (e.g., "https://viacep.com.br")
            telemetry: Tracing handle
            timeout: Request timeout in seconds (default: 10.0)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.telemetry = telemetry
        self.client = get_traced_client(telemetry, timeout=timeout)

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()

    async def lookup(self, cep: str) -> AddressLookupResult:
        """
        Resolve a CEP to its city.

        Args:
            cep: Validated 8-digit CEP

        Returns:
            AddressLookupResult; ``found`` is False when ViaCEP reports the
            CEP as unknown (erro flag or empty locality)

        Raises:
            AddressLookupError: On transport failure, timeout, non-2xx status
                or an unparseable body
        """
        with self.telemetry.tracer.start_as_current_span("lookup-cep-viacep") as span:
            span.set_attribute("cep", cep)

            try:
                response = await self.client.get(f"{self.base_url}/ws/{cep}/json/")
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                mark_span_error(span, "viacep request failed")
                logger.error(
                    f"ViaCEP request failed: {type(e).__name__}",
                    extra={"context": {"cep": cep, "error": str(e)}},
                )
                raise AddressLookupError(f"ViaCEP request failed: {type(e).__name__}") from e

            span.set_attribute("http_status", response.status_code)

            if not response.is_success:
                mark_span_error(span, "viacep returned error status")
                logger.error(
                    f"ViaCEP returned error: {response.status_code}",
                    extra={"context": {"cep": cep}},
                )
                raise AddressLookupError(f"ViaCEP returned status {response.status_code}")

            try:
                payload = ViaCEPResponse.model_validate_json(response.content)
            except ValidationError as e:
                mark_span_error(span, "failed to parse response")
                logger.error("ViaCEP response could not be parsed", extra={"context": {"cep": cep}})
                raise AddressLookupError("ViaCEP response could not be parsed") from e

            result = AddressLookupResult.from_viacep(payload)
            span.set_attribute("cep_found", result.found)
            if result.found:
                span.set_attribute("city", result.city)

            return result


# ==============================================================================
# WeatherAPI Client
# ==============================================================================


class WeatherAPIClient:
    """
    HTTP client for the WeatherAPI current conditions endpoint.

    The API key is checked per call rather than at construction, so the
    service starts (and answers health checks) without it; every weather
    request then fails with WeatherCredentialMissingError.

    Example:
        >>> client = WeatherAPIClient("https://api.weatherapi.com", SecretStr("key"), telemetry)
        >>> await client.current_temperature("São Paulo")
        25.0
    """

    def __init__(
        self,
        base_url: str,
        api_key: SecretStr,
        telemetry: Telemetry,
        timeout: float = 10.0,
    ):
        """
        Initialize WeatherAPI client.

        Args:
            base_url: Base URL of WeatherAPI (e.g., "https://api.weatherapi.com")
            api_key: WeatherAPI key (may be empty)
            telemetry: Tracing handle
            timeout: Request timeout in seconds (default: 10.0)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.telemetry = telemetry
        self.client = get_traced_client(telemetry, timeout=timeout)

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key.get_secret_value())

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()

    async def current_temperature(self, city: str) -> float:
        """
        Fetch the current temperature of a city in Celsius.

        Args:
            city: City name; URL-encoded into the ``q`` query parameter

        Returns:
            Current temperature in Celsius

        Raises:
            WeatherCredentialMissingError: If no API key is configured
            WeatherLookupError: On transport failure, timeout, any non-200
                status (even with a body) or an unparseable body
        """
        with self.telemetry.tracer.start_as_current_span("get-weather-api") as span:
            span.set_attribute("city", city)

            if not self.has_credential:
                mark_span_error(span, "missing api key")
                logger.error("WEATHER_API_KEY not set - cannot query weather provider")
                raise WeatherCredentialMissingError("WEATHER_API_KEY not set")

            params = {"key": self.api_key.get_secret_value(), "q": city, "aqi": "no"}

            try:
                response = await self.client.get(f"{self.base_url}/v1/current.json", params=params)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                mark_span_error(span, "weather api request failed")
                logger.error(
                    f"WeatherAPI request failed: {type(e).__name__}",
                    extra={"context": {"city": city}},
                )
                raise WeatherLookupError(f"WeatherAPI request failed: {type(e).__name__}") from e

            span.set_attribute("http_status", response.status_code)

            if response.status_code != httpx.codes.OK:
                mark_span_error(span, "weather api returned non-200")
                logger.error(
                    f"WeatherAPI returned error: {response.status_code}",
                    extra={"context": {"city": city}},
                )
                raise WeatherLookupError(f"WeatherAPI returned status {response.status_code}")

            try:
                payload = WeatherAPIResponse.model_validate_json(response.content)
            except ValidationError as e:
                mark_span_error(span, "failed to parse response")
                logger.error("WeatherAPI response could not be parsed", extra={"context": {"city": city}})
                raise WeatherLookupError("WeatherAPI response could not be parsed") from e

            temp_c = payload.current.temp_c
            span.set_attribute("temp_c", temp_c)
            return temp_c
