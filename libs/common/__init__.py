"""Common utilities, schemas and exceptions."""

from libs.common.exceptions import (
    AddressLookupError,
    CepWeatherError,
    ConfigurationError,
    DownstreamUnavailableError,
    RequestConstructionError,
    WeatherCredentialMissingError,
    WeatherLookupError,
    ZipcodeNotFoundError,
)
from libs.common.schemas import (
    ErrorResult,
    HealthResponse,
    PostalCodeRequest,
    TimestampSerializerMixin,
    WeatherResult,
)
from libs.common.validators import is_valid_cep

__all__ = [
    # Exceptions
    "CepWeatherError",
    "ConfigurationError",
    "RequestConstructionError",
    "DownstreamUnavailableError",
    "AddressLookupError",
    "ZipcodeNotFoundError",
    "WeatherLookupError",
    "WeatherCredentialMissingError",
    # Schemas
    "PostalCodeRequest",
    "WeatherResult",
    "ErrorResult",
    "HealthResponse",
    "TimestampSerializerMixin",
    # Validation
    "is_valid_cep",
]
