"""
Exception hierarchy for the CEP weather platform.

This module defines the custom exceptions raised by the service clients and
the weather resolver, organized in a hierarchy so each HTTP handler can map a
failure cause to exactly one status code.

Mapping used by the handlers:
    RequestConstructionError   -> 500 "internal error"
    DownstreamUnavailableError -> 503 "service unavailable"
    AddressLookupError         -> 500 "internal error"
    ZipcodeNotFoundError       -> 404 "can not find zipcode"
    WeatherLookupError         -> 500 "failed to get weather"
"""


class CepWeatherError(Exception):
    """
    Base exception for all platform errors.

    All custom exceptions in the platform inherit from this class,
    allowing for catch-all error handling when needed.

    Example:
        >>> try:
        ...     await resolver.resolve("01310100")
        ... except CepWeatherError as e:
        ...     logger.error(f"Resolution failed: {e}")
    """

    pass


class ConfigurationError(CepWeatherError):
    """
    Raised when required configuration or secrets are missing.

    Example:
        >>> if not api_key:
        ...     raise ConfigurationError("WEATHER_API_KEY not set")
    """

    pass


class RequestConstructionError(CepWeatherError):
    """Raised when an outbound request cannot be built (e.g. malformed base URL)."""

    pass


class DownstreamUnavailableError(CepWeatherError):
    """
    Raised when a downstream internal service cannot be reached.

    Covers connection refusal, timeouts and any other transport-level
    failure. A response with an error status is NOT this error: it is a
    valid answer and must be relayed.
    """

    pass


class AddressLookupError(CepWeatherError):
    """
    Raised when the address lookup provider fails to answer usably.

    Transport errors, timeouts, non-success statuses and unparseable bodies
    all end up here. A well-formed "not found" answer is not an error; see
    ZipcodeNotFoundError.
    """

    pass


class ZipcodeNotFoundError(CepWeatherError):
    """
    Raised when the lookup provider reports that a CEP does not exist.

    Example:
        >>> if not address.found:
        ...     raise ZipcodeNotFoundError(cep)
    """

    def __init__(self, cep: str) -> None:
        super().__init__(f"CEP {cep} not found")
        self.cep = cep


class WeatherLookupError(CepWeatherError):
    """
    Raised when the current temperature for a city cannot be obtained.

    Any cause qualifies: missing credential, transport error, non-200 status
    or an unparseable body.
    """

    pass


class WeatherCredentialMissingError(WeatherLookupError, ConfigurationError):
    """Raised when the weather provider credential is not configured."""

    pass
