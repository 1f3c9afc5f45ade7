import asyncio
from typing import Any, Optional

import httpx
import structlog

from src.config.config import Config
from src.exceptions import WeatherRelayError
from src.exceptions.weather import (
    ConfigurationError,
    InternalRelayError,
    UpstreamStatusError,
    UpstreamUnreachableError,
)
from src.models.weather.weather import LocationQuery, UpstreamRequest, WeatherBundle

logger = structlog.get_logger(__name__)

CURRENT_WEATHER_ENDPOINT = "weather"
FORECAST_ENDPOINT = "forecast"


class WeatherRelayService:
    """
    Relay for the OpenWeatherMap current-weather and forecast endpoints.

    Every relay issues both upstream calls for the same location and returns
    their bodies unmodified. Either both succeed or the relay fails; there is
    no retry and no partial result.
    """

    def __init__(self, settings: Config, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the relay.

        Args:
            settings: Application configuration (credential, base URL, units, timeouts)
            client: Shared HTTP client; a short-lived one is opened per relay when omitted
        """
        self.settings = settings
        self.client = client
        self.timeout = httpx.Timeout(settings.request_timeout, connect=settings.connect_timeout)

    def build_request(self, endpoint: str, location: LocationQuery) -> UpstreamRequest:
        """Build the outbound call for one endpoint."""
        params = location.to_params()
        params["appid"] = self.settings.openweather_api_key
        params["units"] = self.settings.openweather_units

        return UpstreamRequest(
            endpoint=endpoint,
            url=f"{self.settings.openweather_base_url}/{endpoint}",
            params=params,
        )

    async def fetch(self, client: httpx.AsyncClient, upstream_request: UpstreamRequest) -> Any:
        """
        Perform one upstream call.

        Args:
            client: HTTP client to send the request with
            upstream_request: The call to perform

        Returns:
            Decoded JSON response body

        Raises:
            UpstreamStatusError: If the upstream answered with a non-2xx status
            UpstreamUnreachableError: If no response was received
            InternalRelayError: For any other failure
        """
        logger.info(
            "Making API request",
            endpoint=upstream_request.endpoint,
            url=upstream_request.url,
            params=upstream_request.redacted_params(),
        )

        try:
            response = await client.get(
                upstream_request.url,
                params=upstream_request.params,
                timeout=self.timeout,
                follow_redirects=True,
            )
        except httpx.UnsupportedProtocol as e:
            logger.error(
                "Error setting up weather service request",
                endpoint=upstream_request.endpoint,
                error=str(e),
            )
            raise InternalRelayError() from e
        except httpx.TransportError as e:
            logger.error(
                "No response received from weather service",
                endpoint=upstream_request.endpoint,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise UpstreamUnreachableError() from e

        if not response.is_success:
            body = _decode_error_body(response)
            logger.error(
                "Weather service responded with an error",
                endpoint=upstream_request.endpoint,
                status_code=response.status_code,
                response_body=body,
            )
            raise UpstreamStatusError(
                status_code=response.status_code,
                message=_extract_message(body),
                body=body,
            )

        # An empty success body (e.g. 204) is relayed as an empty string
        if not response.content:
            return ""

        try:
            return response.json()
        except ValueError as e:
            logger.error(
                "Failed to decode weather service response",
                endpoint=upstream_request.endpoint,
                response_text=response.text,
                error=str(e),
            )
            raise InternalRelayError() from e

    async def get_weather(
        self,
        city: Optional[str] = None,
        lat: Optional[Any] = None,
        lon: Optional[Any] = None,
    ) -> WeatherBundle:
        """
        Get current weather and forecast for a location.

        Args:
            city: City name; takes precedence over coordinates
            lat: Latitude, used only together with ``lon`` and without ``city``
            lon: Longitude, used only together with ``lat`` and without ``city``

        Returns:
            WeatherBundle with both upstream bodies

        Raises:
            ConfigurationError: If no OpenWeatherMap API key is configured
            MissingLocationError: If no usable location was given
            UpstreamStatusError: If either upstream call returned an error status
            UpstreamUnreachableError: If either upstream call got no response
            InternalRelayError: For any other failure
        """
        if not self.settings.openweather_api_key:
            logger.error("OPENWEATHER_API_KEY is not configured")
            raise ConfigurationError()

        location = LocationQuery.from_params(city=city, lat=lat, lon=lon)
        logger.info("Fetching weather", **location.describe())

        try:
            if self.client is not None:
                return await self._relay(self.client, location)

            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                return await self._relay(client, location)

        except WeatherRelayError:
            raise

        except Exception as e:
            logger.error(
                "Unexpected error while relaying weather request",
                error=str(e),
                exc_info=True,
                **location.describe(),
            )
            raise InternalRelayError() from e

    async def _relay(self, client: httpx.AsyncClient, location: LocationQuery) -> WeatherBundle:
        current_request = self.build_request(CURRENT_WEATHER_ENDPOINT, location)
        forecast_request = self.build_request(FORECAST_ENDPOINT, location)

        results = await asyncio.gather(
            self.fetch(client, current_request),
            self.fetch(client, forecast_request),
            return_exceptions=True,
        )

        # Current-weather failures win when both calls fail
        for result in results:
            if isinstance(result, BaseException):
                raise result

        current, forecast = results
        logger.info("Successfully fetched weather", **location.describe())
        return WeatherBundle(current=current, forecast=forecast)


def _decode_error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _extract_message(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        message = body.get("message")
        if message:
            return str(message)
    return None
