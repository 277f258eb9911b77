"""
HTTP client for communicating with the Weather Service.

The gateway is a transparent pass-through above its own validation layer:
whatever the Weather Service answers, status and body are handed back
untouched. Only the failure to get an answer at all is turned into an error.
"""

import logging

import httpx

from libs.common.exceptions import DownstreamUnavailableError, RequestConstructionError
from libs.common.logging import get_traced_client
from libs.common.schemas import PostalCodeRequest
from libs.common.tracing import Telemetry, mark_span_error

logger = logging.getLogger(__name__)

WEATHER_PATH = "/weather"


class WeatherServiceClient:
    """
    HTTP client for the Weather Service.

    Example:
        >>> client = WeatherServiceClient("http://weather-service:8081", telemetry)
        >>> response = await client.forward(PostalCodeRequest(cep="01310100"))
        >>> response.status_code
        200
    """

    def __init__(
        self,
        base_url: str,
        telemetry: Telemetry,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize Weather Service client.

        Args:
            base_url: Base URL of the Weather Service (e.g., "http://weather-service:8081")
            telemetry: Tracing handle
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional httpx transport (e.g. ASGITransport to call the app in-process)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.telemetry = telemetry
        self.client = get_traced_client(telemetry, timeout=timeout, transport=transport)

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()

    async def health_check(self) -> bool:
        """
        Check if the Weather Service is reachable and healthy.

        Returns:
            True if /health answered 200, False otherwise
        """
        try:
            response = await self.client.get(f"{self.base_url}/health")
            return response.status_code == 200
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Weather Service health check failed: {e}")
            return False

    def build_forward_request(self, payload: PostalCodeRequest) -> httpx.Request:
        """
        Build the POST /weather request carrying the CEP body.

        Raises:
            RequestConstructionError: If the configured base URL cannot form
                an absolute http(s) URL
        """
        try:
            request = self.client.build_request(
                "POST",
                f"{self.base_url}{WEATHER_PATH}",
                content=payload.model_dump_json().encode(),
                headers={"Content-Type": "application/json"},
            )
        except httpx.InvalidURL as e:
            raise RequestConstructionError(f"Invalid Weather Service URL: {e}") from e

        if request.url.scheme not in ("http", "https") or not request.url.host:
            raise RequestConstructionError(f"Invalid Weather Service URL: {request.url}")

        return request

    async def forward(self, payload: PostalCodeRequest) -> httpx.Response:
        """
        Forward a validated CEP to the Weather Service.

        Any answer is returned as-is, including 4xx/5xx statuses.

        Args:
            payload: Validated postal code request

        Returns:
            The Weather Service response, body fully read

        Raises:
            RequestConstructionError: The outbound request could not be built
            DownstreamUnavailableError: Connection refused, timeout or any
                other failure to obtain a response
        """
        with self.telemetry.tracer.start_as_current_span("forward-to-weather-service") as span:
            try:
                request = self.build_forward_request(payload)
            except RequestConstructionError:
                mark_span_error(span, "failed to create request")
                logger.error(
                    "Could not build Weather Service request",
                    extra={"context": {"weather_service_url": self.base_url}},
                )
                raise

            try:
                response = await self.client.send(request)
            except httpx.RequestError as e:
                mark_span_error(span, "weather service unavailable")
                logger.error(
                    f"Weather Service unavailable: {type(e).__name__}",
                    extra={"context": {"weather_service_url": self.base_url, "error": str(e)}},
                )
                raise DownstreamUnavailableError(
                    f"Weather Service unavailable: {type(e).__name__}"
                ) from e

            span.set_attribute("response_status", response.status_code)
            return response
