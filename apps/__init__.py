"""
Apps package - FastAPI microservices for the CEP weather platform.

This package contains the two services of the request path:
- cep_gateway: Public entry point, validates and forwards CEPs
- weather_service: Resolves a CEP to its city and current temperature
"""
