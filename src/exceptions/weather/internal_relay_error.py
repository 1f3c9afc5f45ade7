from src.exceptions.base import WeatherRelayError


class InternalRelayError(WeatherRelayError):
    """Exception for any other local failure while relaying a request."""

    pass
