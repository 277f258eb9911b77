"""Tests for temperature scale conversions."""

import pytest

from apps.weather_service.temperature import celsius_to_fahrenheit, celsius_to_kelvin


class TestCelsiusToFahrenheit:
    def test_freezing_point(self) -> None:
        assert celsius_to_fahrenheit(0) == 32

    def test_boiling_point(self) -> None:
        assert celsius_to_fahrenheit(100) == pytest.approx(212)

    def test_minus_forty_is_the_same_on_both_scales(self) -> None:
        assert celsius_to_fahrenheit(-40) == pytest.approx(-40)

    def test_fractional_value(self) -> None:
        assert celsius_to_fahrenheit(25.5) == pytest.approx(77.9)


class TestCelsiusToKelvin:
    def test_zero_uses_integer_offset(self) -> None:
        """Kelvin offset is 273, not 273.15."""
        assert celsius_to_kelvin(0) == 273

    def test_room_temperature(self) -> None:
        assert celsius_to_kelvin(25) == 298

    def test_negative_value(self) -> None:
        assert celsius_to_kelvin(-10.5) == pytest.approx(262.5)
