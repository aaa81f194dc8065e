"""
RaastaFix - Configuration Management
Centralized configuration using pydantic-settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # OpenWeatherMap (rain detection, simulated when missing)
    openweather_api_key: Optional[str] = None
    openweather_url: str = "https://api.openweathermap.org/data/2.5/weather"

    # Nominatim (reverse geocoding)
    nominatim_url: str = "https://nominatim.openstreetmap.org/reverse"
    nominatim_user_agent: str = "raastafix/0.2"

    # Database
    database_url: str = "sqlite:///raastafix.db"

    # External calls
    http_timeout_seconds: float = 10.0
    geolocation_timeout_seconds: float = 10.0

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
