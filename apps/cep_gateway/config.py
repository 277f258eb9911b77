"""
CEP Gateway configuration.

Settings loaded from environment variables or .env file.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CepGatewaySettings(BaseSettings):
    """CEP Gateway settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Both services may share one .env file
    )

    # Service Configuration
    service_name: str = "cep-gateway"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    shutdown_grace_seconds: int = Field(
        default=10,
        ge=1,
        description="Grace period for in-flight requests and span export at shutdown",
    )

    # Tracing Configuration
    otel_exporter_otlp_endpoint: str = Field(
        default="otel-collector:4317",
        description="OTLP gRPC collector endpoint",
    )
    tracing_enabled: bool = True

    # Downstream Weather Service
    weather_service_url: str = Field(
        default="http://weather-service:8081",
        description="Base URL of the Weather Service (POST /weather is appended)",
    )
    forward_timeout_seconds: float = Field(default=30.0, gt=0)


@lru_cache
def get_settings() -> CepGatewaySettings:
    """Get cached settings instance."""
    return CepGatewaySettings()
