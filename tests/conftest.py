import json
from typing import Any, Callable, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from main import create_app
from src.api.weather import get_relay_service
from src.config.config import Config
from src.services.weather_relay_service import WeatherRelayService

BASE_URL = "https://api.openweathermap.org/data/2.5"


@pytest.fixture
def relay_config():
    """Configuration with a test API key and no file logging."""
    return Config(
        openweather_api_key="test-weather-key",
        openweather_base_url=BASE_URL,
        openweather_units="metric",
        request_timeout=2.0,
        connect_timeout=1.0,
        environment="test",
        log_dir=None,
    )


@pytest.fixture
def keyless_config():
    """Configuration of a deployment that forgot the API key."""
    return Config(openweather_api_key=None, openweather_base_url=BASE_URL, environment="test")


@pytest.fixture
def current_weather_payload():
    """Sample OpenWeatherMap current-weather body."""
    return {
        "coord": {"lon": -0.1278, "lat": 51.5074},
        "weather": [{"id": 801, "main": "Clouds", "description": "few clouds", "icon": "02d"}],
        "base": "stations",
        "main": {
            "temp": 15.5,
            "feels_like": 14.8,
            "temp_min": 12.3,
            "temp_max": 18.7,
            "pressure": 1013,
            "humidity": 65,
        },
        "visibility": 10000,
        "wind": {"speed": 3.5, "deg": 180, "gust": 5.0},
        "clouds": {"all": 20},
        "dt": 1696161600,
        "sys": {"type": 2, "id": 2075535, "country": "GB", "sunrise": 1696138800, "sunset": 1696182000},
        "timezone": 3600,
        "id": 2643743,
        "name": "London",
        "cod": 200,
    }


@pytest.fixture
def forecast_payload():
    """Sample OpenWeatherMap 5-day / 3-hour forecast body."""
    return {
        "cod": "200",
        "message": 0,
        "cnt": 2,
        "list": [
            {
                "dt": 1696172400,
                "main": {"temp": 16.1, "humidity": 60},
                "weather": [{"id": 500, "main": "Rain", "description": "light rain", "icon": "10d"}],
                "pop": 0.35,
                "rain": {"3h": 0.42},
                "dt_txt": "2023-10-01 15:00:00",
            },
            {
                "dt": 1696183200,
                "main": {"temp": 13.9, "humidity": 71},
                "weather": [{"id": 800, "main": "Clear", "description": "clear sky", "icon": "01n"}],
                "pop": 0,
                "dt_txt": "2023-10-01 18:00:00",
            },
        ],
        "city": {"id": 2643743, "name": "London", "country": "GB", "timezone": 3600},
    }


class UpstreamStub:
    """
    Fake OpenWeatherMap API backed by httpx.MockTransport.

    Routes are keyed by endpoint name ("weather" or "forecast"); each route is
    either a (status, body) tuple or a callable returning a response or raising a transport error.
    Every received request is recorded.
    """

    def __init__(self, routes: Dict[str, Any]):
        self.routes = routes
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        endpoint = request.url.path.rsplit("/", 1)[-1]
        route = self.routes[endpoint]

        if callable(route):
            return route(request)

        status_code, body = route
        if isinstance(body, (dict, list)):
            return httpx.Response(status_code, content=json.dumps(body).encode())
        return httpx.Response(status_code, text=body)

    def requests_for(self, endpoint: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(f"/{endpoint}")]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def upstream_factory() -> Callable[..., UpstreamStub]:
    """Build an UpstreamStub from endpoint routes."""
    return UpstreamStub


@pytest.fixture
def successful_upstream(upstream_factory, current_weather_payload, forecast_payload):
    """Upstream where both endpoints answer 200."""
    return upstream_factory(
        {
            "weather": (200, current_weather_payload),
            "forecast": (200, forecast_payload),
        }
    )


@pytest.fixture
def make_test_client():
    """
    Build a TestClient whose relay talks to the given upstream stub.

    The lifespan is not entered, so the shared client from the dependency
    override is used instead of a real network client.
    """
    clients = []

    def _make(settings: Config, upstream: UpstreamStub) -> TestClient:
        app = create_app(settings)

        async def override_relay_service():
            async with upstream.client() as client:
                yield WeatherRelayService(settings, client=client)

        app.dependency_overrides[get_relay_service] = override_relay_service
        test_client = TestClient(app)
        clients.append(test_client)
        return test_client

    yield _make

    for test_client in clients:
        test_client.close()
