"""
Weather Service.

Resolves a CEP to the current temperature of its city:
1. Validate the CEP format
2. Resolve the CEP to a city through ViaCEP
3. Fetch the current temperature for that city from WeatherAPI
4. Convert Celsius to Fahrenheit and Kelvin

Architecture:
    CEP Gateway → Weather Service → ViaCEP (HTTP)
                                  ↓
                                  WeatherAPI (HTTP)
"""

__version__ = "1.0.0"
