from src.exceptions.weather.configuration_error import ConfigurationError
from src.exceptions.weather.internal_relay_error import InternalRelayError
from src.exceptions.weather.missing_location_error import MissingLocationError
from src.exceptions.weather.upstream_status_error import UpstreamStatusError
from src.exceptions.weather.upstream_unreachable_error import UpstreamUnreachableError

__all__ = [
    "ConfigurationError",
    "InternalRelayError",
    "MissingLocationError",
    "UpstreamStatusError",
    "UpstreamUnreachableError",
]
