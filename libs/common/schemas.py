"""Shared Pydantic schemas for the CEP weather services.

Defines the wire contract common to the gateway (POST /cep) and the
weather service (POST /weather), which accept and return identical shapes,
plus the mixins and health model every service exposes.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class TimestampSerializerMixin:
    """
    Mixin providing consistent UTC timestamp serialization.

    Serializes datetime fields named 'timestamp' with 'Z' suffix instead of
    '+00:00' for cleaner ISO 8601 format consistency across API responses.

    Usage:
        class MyResponse(TimestampSerializerMixin, BaseModel):
            timestamp: datetime
            # ... other fields

    Note: Mixin must be listed BEFORE BaseModel in inheritance order.
    """

    @field_serializer("timestamp")
    def serialize_timestamp(self, value: datetime) -> str:
        """Serialize timestamp with Z suffix for UTC consistency."""
        return value.isoformat().replace("+00:00", "Z")


# ==============================================================================
# Request / Response Models
# ==============================================================================


class PostalCodeRequest(BaseModel):
    """
    Request body for POST /cep and POST /weather.

    Parsing only checks the shape ({"cep": <string>}); the 8-digit format is
    checked separately with libs.common.validators.is_valid_cep so that both
    failures map to the same 422 response.
    """

    model_config = ConfigDict(strict=True)

    cep: str


class WeatherResult(BaseModel):
    """
    Successful weather answer.

    Field names on the wire are temp_C / temp_F / temp_K; always serialize
    with ``model_dump(by_alias=True)``.

    Example:
        >>> WeatherResult(city="São Paulo", temp_c=25.0, temp_f=77.0, temp_k=298.0)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    city: str = Field(..., min_length=1)
    temp_c: float = Field(..., alias="temp_C")
    temp_f: float = Field(..., alias="temp_F")
    temp_k: float = Field(..., alias="temp_K")


class ErrorResult(BaseModel):
    """Error body; the HTTP status code carries the failure category."""

    message: str


class HealthResponse(TimestampSerializerMixin, BaseModel):
    """Health check response shared by both services."""

    status: str  # healthy, degraded
    service: str
    version: str
    timestamp: datetime
    details: dict[str, str | bool] = Field(default_factory=dict)
