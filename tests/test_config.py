import pytest
from pydantic import ValidationError

from src.config.config import Config


class TestConfig:
    """Test cases for the settings object."""

    def test_defaults(self, monkeypatch):
        for name in ("OPENWEATHER_API_KEY", "OPENWEATHER_BASE_URL", "OPENWEATHER_UNITS", "PORT", "API_PORT"):
            monkeypatch.delenv(name, raising=False)

        settings = Config(_env_file=None)

        assert settings.openweather_api_key is None
        assert settings.openweather_base_url == "https://api.openweathermap.org/data/2.5"
        assert settings.openweather_units == "metric"
        assert settings.api_port == 3000
        assert not settings.api_key_configured

    def test_blank_api_key_counts_as_missing(self):
        settings = Config(_env_file=None, openweather_api_key="   ")

        assert settings.openweather_api_key is None
        assert not settings.api_key_configured

    def test_values_from_environment(self, monkeypatch):
        monkeypatch.setenv("OPENWEATHER_API_KEY", "env-key")
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("OPENWEATHER_BASE_URL", "http://localhost:9000/data/2.5/")

        settings = Config(_env_file=None)

        assert settings.openweather_api_key == "env-key"
        assert settings.api_key_configured
        assert settings.api_port == 8080
        assert settings.openweather_base_url == "http://localhost:9000/data/2.5"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Config(_env_file=None, log_level="LOUD")

    def test_invalid_units(self):
        with pytest.raises(ValidationError):
            Config(_env_file=None, openweather_units="kelvin-ish")

    def test_log_level_is_normalised(self):
        assert Config(_env_file=None, log_level="debug").log_level == "DEBUG"
