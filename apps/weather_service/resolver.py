"""
Weather resolution workflow.

Chains the two collaborator calls: the CEP is resolved to a city first, and
only a found city is sent to the weather provider. The first failure ends
the workflow with a typed exception the HTTP layer maps to a status code.
"""

import logging
from typing import Protocol

from apps.weather_service.schemas import AddressLookupResult
from apps.weather_service.temperature import celsius_to_fahrenheit, celsius_to_kelvin
from libs.common.exceptions import ZipcodeNotFoundError
from libs.common.schemas import WeatherResult

logger = logging.getLogger(__name__)


class AddressLookup(Protocol):
    async def lookup(self, cep: str) -> AddressLookupResult: ...


class WeatherProvider(Protocol):
    async def current_temperature(self, city: str) -> float: ...


class WeatherResolver:
    """
    Resolve a CEP to the current temperature of its city.

    Example:
        >>> resolver = WeatherResolver(address_lookup=viacep, weather_provider=weatherapi)
        >>> result = await resolver.resolve("01310100")
        >>> result.model_dump(by_alias=True)
        {'city': 'São Paulo', 'temp_C': 25.0, 'temp_F': 77.0, 'temp_K': 298.0}
    """

    def __init__(self, address_lookup: AddressLookup, weather_provider: WeatherProvider):
        self.address_lookup = address_lookup
        self.weather_provider = weather_provider

    async def resolve(self, cep: str) -> WeatherResult:
        """
        Run lookup then weather for a validated CEP.

        Args:
            cep: Validated 8-digit CEP

        Returns:
            WeatherResult with the city and its temperature in three scales

        Raises:
            AddressLookupError: Lookup transport/parse failure
            ZipcodeNotFoundError: Lookup answered "not found"
            WeatherLookupError: Weather failure of any kind
        """
        address = await self.address_lookup.lookup(cep)
        if not address.found:
            raise ZipcodeNotFoundError(cep)

        temp_c = await self.weather_provider.current_temperature(address.city)

        result = WeatherResult(
            city=address.city,
            temp_c=temp_c,
            temp_f=celsius_to_fahrenheit(temp_c),
            temp_k=celsius_to_kelvin(temp_c),
        )

        logger.info(
            f"Weather resolved for CEP {cep}",
            extra={
                "context": {
                    "cep": cep,
                    "city": result.city,
                    "temp_c": result.temp_c,
                }
            },
        )
        return result
