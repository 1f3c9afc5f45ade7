from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.exceptions.weather import MissingLocationError


class LocationQuery(BaseModel):
    """
    Location requested by the caller.

    Exactly one source of truth is kept: a city name, or a latitude/longitude
    pair. Use ``from_params`` to build one from raw query parameters.
    """

    model_config = ConfigDict(frozen=True)

    city: Optional[str] = Field(None, description="City name (e.g., London)")
    lat: Optional[str] = Field(None, description="Latitude, forwarded verbatim")
    lon: Optional[str] = Field(None, description="Longitude, forwarded verbatim")

    @field_validator("lat", "lon", mode="before")
    def coerce_coordinate(cls, v):
        """Accept numeric coordinates; they are forwarded as strings."""
        if isinstance(v, bool):
            raise ValueError("Coordinate must be a number or a numeric string")
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @classmethod
    def from_params(
        cls,
        city: Optional[str] = None,
        lat: Optional[Any] = None,
        lon: Optional[Any] = None,
    ) -> "LocationQuery":
        """
        Resolve raw query parameters into a location.

        A non-empty city takes precedence and the coordinates are discarded.

        Raises:
            MissingLocationError: If neither a city nor both coordinates are present
        """
        if city:
            return cls(city=city)
        if _present(lat) and _present(lon):
            return cls(lat=lat, lon=lon)
        raise MissingLocationError()

    @property
    def is_city(self) -> bool:
        return self.city is not None

    def to_params(self) -> Dict[str, str]:
        """Location fragment shared by every upstream call."""
        if self.is_city:
            return {"q": self.city}
        return {"lat": self.lat, "lon": self.lon}

    def describe(self) -> Dict[str, str]:
        """Fields worth logging for this location."""
        if self.is_city:
            return {"city": self.city}
        return {"lat": self.lat, "lon": self.lon}


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    return True


class UpstreamRequest(BaseModel):
    """A single outbound call to the OpenWeatherMap API."""

    model_config = ConfigDict(frozen=True)

    endpoint: str = Field(..., description="API endpoint name (weather/forecast)")
    url: str = Field(..., description="Absolute endpoint URL without query string")
    params: Dict[str, str] = Field(..., description="Query parameters including credentials")

    def redacted_params(self) -> Dict[str, str]:
        """Query parameters safe to log."""
        return {key: ("***" if key == "appid" else value) for key, value in self.params.items()}


class WeatherBundle(BaseModel):
    """Current conditions and forecast, passed through as decoded by the upstream."""

    current: Any = Field(..., description="Upstream current-weather response body")
    forecast: Any = Field(..., description="Upstream forecast response body")
