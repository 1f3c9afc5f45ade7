from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """
    Application settings loaded from environment variables and .env files.

    This class handles all configuration for the weather relay including
    the OpenWeatherMap credential, outbound timeouts, the listen address
    and logging.
    """

    # OpenWeatherMap Configuration
    openweather_api_key: Optional[str] = Field(
        default=None, description="OpenWeatherMap API key for weather data"
    )
    openweather_base_url: str = Field(
        default="https://api.openweathermap.org/data/2.5",
        description="OpenWeatherMap API base URL",
    )
    openweather_units: str = Field(
        default="metric", description="Temperature units (metric/imperial/standard)"
    )

    # Outbound HTTP Configuration
    request_timeout: float = Field(
        default=10.0, gt=0, description="Timeout in seconds for each upstream call"
    )
    connect_timeout: float = Field(
        default=5.0, gt=0, description="Connect timeout in seconds for each upstream call"
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="FastAPI host")
    api_port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("PORT", "API_PORT", "api_port"),
        description="FastAPI port",
    )

    # Logging Configuration
    environment: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format (json/text)")
    log_dir: Optional[str] = Field(
        default=None, description="Directory for log files; console only when unset"
    )

    @field_validator("openweather_api_key")
    def validate_openweather_api_key(cls, v):
        # A blank key counts as missing; the relay rejects requests without one
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("openweather_base_url")
    def validate_openweather_base_url(cls, v):
        return v.rstrip("/")

    @field_validator("openweather_units")
    def validate_openweather_units(cls, v):
        valid_units = ["metric", "imperial", "standard"]
        if v.lower() not in valid_units:
            raise ValueError(f"Invalid units: {v}. Must be one of {valid_units}")
        return v.lower()

    @field_validator("log_level")
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    def validate_log_format(cls, v):
        valid_formats = ["json", "text"]
        if v.lower() not in valid_formats:
            raise ValueError(f"Invalid log format: {v}. Must be one of {valid_formats}")
        return v.lower()

    @property
    def api_key_configured(self) -> bool:
        return bool(self.openweather_api_key)

    def get_log_dir_path(self) -> Optional[Path]:
        """Get the absolute path to the log directory, if file logging is enabled."""
        if not self.log_dir:
            return None
        return Path(self.log_dir).resolve()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


config = Config()
