"""Temperature scale conversions."""

# 273, not 273.15
KELVIN_OFFSET = 273.0


def celsius_to_fahrenheit(celsius: float) -> float:
    """Convert Celsius to Fahrenheit (F = C * 1.8 + 32)."""
    return celsius * 1.8 + 32


def celsius_to_kelvin(celsius: float) -> float:
    """Convert Celsius to Kelvin (K = C + 273)."""
    return celsius + KELVIN_OFFSET
