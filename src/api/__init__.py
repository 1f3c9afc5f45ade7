from src.api.weather import weather_router

__all__ = ["weather_router"]
