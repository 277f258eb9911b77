"""
CEP Gateway.

Public entry point of the platform. Validates the CEP sent by the client and
forwards it to the Weather Service, relaying the answer unchanged.

Architecture:
    Client → CEP Gateway (HTTP) → Weather Service
"""

__version__ = "1.0.0"
