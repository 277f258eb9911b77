"""
Pydantic schemas for the Weather Service's external collaborators.

Defines:
- ViaCEP address lookup response
- WeatherAPI current conditions response
- AddressLookupResult, the lookup outcome handed to the resolver
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ==============================================================================
# ViaCEP Models
# ==============================================================================


class ViaCEPResponse(BaseModel):
    """Response from ViaCEP GET /ws/{cep}/json/."""

    model_config = ConfigDict(extra="ignore")

    cep: str = ""
    logradouro: str = ""
    complemento: str = ""
    bairro: str = ""
    localidade: str = ""
    uf: str = ""
    erro: bool = False

    @field_validator("erro", mode="before")
    @classmethod
    def _parse_erro(cls, value: Any) -> Any:
        # ViaCEP has answered both {"erro": true} and {"erro": "true"}
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return value


class AddressLookupResult(BaseModel):
    """Outcome of a successful lookup call: a city, or a not-found signal."""

    model_config = ConfigDict(frozen=True)

    city: str = ""
    found: bool

    @classmethod
    def from_viacep(cls, response: ViaCEPResponse) -> "AddressLookupResult":
        """Both an explicit erro flag and an empty locality mean not found."""
        if response.erro or not response.localidade:
            return cls(found=False)
        return cls(city=response.localidade, found=True)


# ==============================================================================
# WeatherAPI Models
# ==============================================================================


class WeatherAPICurrent(BaseModel):
    """Current conditions block."""

    temp_c: float = Field(..., allow_inf_nan=False)


class WeatherAPIResponse(BaseModel):
    """Response from WeatherAPI GET /v1/current.json."""

    model_config = ConfigDict(extra="ignore")

    current: WeatherAPICurrent
