from src.exceptions.base import WeatherRelayError


class MissingLocationError(WeatherRelayError):
    """Exception for requests carrying neither a city nor a latitude/longitude pair."""

    default_message = "City or latitude/longitude parameters are required"
    status_code = 400
