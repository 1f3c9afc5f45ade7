from typing import Any, Dict, Optional


class WeatherRelayError(Exception):
    """Base exception for all weather relay errors."""

    default_message = "Internal server error"
    status_code = 500

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_response(self) -> Dict[str, Any]:
        """Render the JSON body returned to the caller."""
        return {"error": self.message}
