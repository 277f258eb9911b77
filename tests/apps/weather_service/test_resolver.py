"""Tests for WeatherResolver with in-memory collaborators."""

from __future__ import annotations

import pytest

from apps.weather_service.resolver import WeatherResolver
from apps.weather_service.schemas import AddressLookupResult
from libs.common.exceptions import (
    AddressLookupError,
    WeatherLookupError,
    ZipcodeNotFoundError,
)


class FakeAddressLookup:
    def __init__(self, result: AddressLookupResult | None = None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls: list[str] = []

    async def lookup(self, cep: str) -> AddressLookupResult:
        self.calls.append(cep)
        if self.error is not None:
            raise self.error
        assert self.result is not None
        return self.result


class FakeWeatherProvider:
    def __init__(self, temp_c: float = 25.0, error: Exception | None = None):
        self.temp_c = temp_c
        self.error = error
        self.calls: list[str] = []

    async def current_temperature(self, city: str) -> float:
        self.calls.append(city)
        if self.error is not None:
            raise self.error
        return self.temp_c


class TestWeatherResolver:
    @pytest.mark.asyncio()
    async def test_resolve_success(self) -> None:
        lookup = FakeAddressLookup(AddressLookupResult(city="São Paulo", found=True))
        weather = FakeWeatherProvider(temp_c=25.0)
        resolver = WeatherResolver(lookup, weather)

        result = await resolver.resolve("01310100")

        dumped = result.model_dump(by_alias=True)
        assert dumped["city"] == "São Paulo"
        assert set(dumped) == {"city", "temp_C", "temp_F", "temp_K"}
        assert dumped["temp_C"] == pytest.approx(25.0)
        assert dumped["temp_F"] == pytest.approx(77.0)
        assert dumped["temp_K"] == pytest.approx(298.0)
        assert lookup.calls == ["01310100"]
        assert weather.calls == ["São Paulo"]

    @pytest.mark.asyncio()
    async def test_not_found_skips_weather_provider(self) -> None:
        lookup = FakeAddressLookup(AddressLookupResult(found=False))
        weather = FakeWeatherProvider()
        resolver = WeatherResolver(lookup, weather)

        with pytest.raises(ZipcodeNotFoundError) as exc_info:
            await resolver.resolve("00000000")

        assert exc_info.value.cep == "00000000"
        assert weather.calls == []

    @pytest.mark.asyncio()
    async def test_lookup_error_propagates(self) -> None:
        lookup = FakeAddressLookup(error=AddressLookupError("ViaCEP request failed"))
        weather = FakeWeatherProvider()
        resolver = WeatherResolver(lookup, weather)

        with pytest.raises(AddressLookupError):
            await resolver.resolve("01310100")

        assert weather.calls == []

    @pytest.mark.asyncio()
    async def test_weather_error_propagates(self) -> None:
        lookup = FakeAddressLookup(AddressLookupResult(city="Recife", found=True))
        weather = FakeWeatherProvider(error=WeatherLookupError("WeatherAPI returned status 500"))
        resolver = WeatherResolver(lookup, weather)

        with pytest.raises(WeatherLookupError):
            await resolver.resolve("50010000")

    @pytest.mark.asyncio()
    async def test_negative_temperature(self) -> None:
        lookup = FakeAddressLookup(AddressLookupResult(city="Urupema", found=True))
        resolver = WeatherResolver(lookup, FakeWeatherProvider(temp_c=-5.0))

        result = await resolver.resolve("88625000")

        assert result.temp_c == -5.0
        assert result.temp_f == pytest.approx(23.0)
        assert result.temp_k == pytest.approx(268.0)
