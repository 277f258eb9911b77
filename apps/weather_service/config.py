"""
Weather Service configuration.

Settings loaded from environment variables or .env file.
"""

from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class WeatherServiceSettings(BaseSettings):
    """Weather Service settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Both services may share one .env file
    )

    # Service Configuration
    service_name: str = "weather-service"
    host: str = "0.0.0.0"
    port: int = 8081
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

    # Address Lookup (ViaCEP)
    viacep_base_url: str = "https://viacep.com.br"
    lookup_timeout_seconds: float = Field(default=10.0, gt=0)

    # Weather Provider (WeatherAPI)
    weather_api_base_url: str = "https://api.weatherapi.com"
    weather_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="WeatherAPI key; requests fail with 500 while unset",
    )
    weather_timeout_seconds: float = Field(default=10.0, gt=0)


@lru_cache
def get_settings() -> WeatherServiceSettings:
    """Get cached settings instance."""
    return WeatherServiceSettings()
