from src.exceptions.base import WeatherRelayError


class UpstreamUnreachableError(WeatherRelayError):
    """Exception for upstream calls that never produced a response (timeout, network failure)."""

    default_message = "No response from external weather service"
    status_code = 500
