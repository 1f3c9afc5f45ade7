from src.exceptions.base import WeatherRelayError

__all__ = ["WeatherRelayError"]
