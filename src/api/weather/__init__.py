from src.api.weather.weather_routes import get_relay_service, router as weather_router

__all__ = ["get_relay_service", "weather_router"]
