"""Prometheus metrics for CEP Gateway."""

from prometheus_client import Counter, Histogram

requests_total = Counter(
    "cep_gateway_requests_total",
    "Total number of CEP requests",
    ["status"],  # HTTP status code returned to the caller
)

request_duration = Histogram(
    "cep_gateway_request_duration_seconds",
    "Time taken to answer a CEP request, forwarding included",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

forward_errors_total = Counter(
    "cep_gateway_forward_errors_total",
    "Total number of requests that could not be forwarded to Weather Service",
    ["reason"],  # unavailable, construction
)
