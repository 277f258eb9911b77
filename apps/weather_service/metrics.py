"""
Prometheus metrics for Weather Service.

Collectors are module-level so they register once per process, however
many app instances are created (tests build several).
"""

from prometheus_client import Counter, Histogram

requests_total = Counter(
    "weather_service_requests_total",
    "Total number of weather requests",
    ["status"],  # HTTP status code
)

request_duration = Histogram(
    "weather_service_request_duration_seconds",
    "Time taken to answer a weather request",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0],
)

upstream_errors_total = Counter(
    "weather_service_upstream_errors_total",
    "Total number of failed or negative collaborator answers",
    ["upstream", "reason"],  # viacep/weatherapi; error, not_found, missing_credential
)
