from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Request

from src.services.weather_relay_service import WeatherRelayService

logger = structlog.get_logger(__name__)

# Create router
router = APIRouter(prefix="/api", tags=["Weather"])


def get_relay_service(request: Request) -> WeatherRelayService:
    """Relay service created by the application lifespan, or one built from the app settings."""
    relay_service = getattr(request.app.state, "relay_service", None)
    if relay_service is None:
        relay_service = WeatherRelayService(request.app.state.settings)
    return relay_service


@router.get("/weather", summary="Get Current Weather and Forecast")
async def get_weather(
    city: Optional[str] = Query(default=None, description="City name; takes precedence over coordinates"),
    lat: Optional[str] = Query(default=None, description="Latitude, used together with lon"),
    lon: Optional[str] = Query(default=None, description="Longitude, used together with lat"),
    relay_service: WeatherRelayService = Depends(get_relay_service),
):
    """
    Get current weather and the 5-day forecast for a location.

    The location is either a city name or a latitude/longitude pair. Both
    upstream OpenWeatherMap responses are returned unmodified.

    Args:
        city: City name to query.
        lat: Latitude of the location.
        lon: Longitude of the location.
        relay_service: Dependency providing the weather relay.

    Returns:
        JSON object with `current` and `forecast` upstream bodies.

    Raises:
        WeatherRelayError: Rendered by the application exception handler as
            400 (missing location), 500 (configuration, no response, internal)
            or the upstream status code.
    """
    logger.info("API request: Get weather", city=city, lat=lat, lon=lon)

    bundle = await relay_service.get_weather(city=city, lat=lat, lon=lon)
    return bundle.model_dump()
