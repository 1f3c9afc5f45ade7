from src.exceptions.base import WeatherRelayError


class ConfigurationError(WeatherRelayError):
    """Exception for a deployment without an OpenWeatherMap API key."""

    default_message = "Server configuration error: API Key missing"
    status_code = 500
