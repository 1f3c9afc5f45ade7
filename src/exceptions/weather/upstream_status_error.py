from typing import Any, Dict, Optional

from src.exceptions.base import WeatherRelayError


class UpstreamStatusError(WeatherRelayError):
    """Exception for error statuses returned by the upstream weather service.

    The upstream status code is propagated to the caller as-is.
    """

    default_message = "Error from external weather service"

    def __init__(self, status_code: int, message: Optional[str] = None, body: Any = None):
        super().__init__(message, status_code=status_code)
        self.body = body

    def to_response(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.status_code}
