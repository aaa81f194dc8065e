"""
RaastaFix - Weather Client
Fetches current conditions from OpenWeatherMap, falling back to a local
simulation when no API key is configured or the service is unreachable.
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx

from raastafix.core.config import settings
from raastafix.core.constants import (
    SIMULATED_HUMIDITY_RANGE,
    SIMULATED_RAIN_THRESHOLD,
    SIMULATED_TEMPERATURE_RANGE,
)

logger = logging.getLogger(__name__)


@dataclass
class WeatherData:
    """Current weather at a report location."""
    is_raining: bool
    temperature: float
    description: str
    humidity: float
    simulated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_raining": self.is_raining,
            "temperature": self.temperature,
            "description": self.description,
            "humidity": self.humidity,
            "simulated": self.simulated,
        }


class WeatherSource(Protocol):
    """Anything that can report current weather for a point."""

    async def get_current_weather(self, lat: float, lng: float) -> WeatherData:
        ...


class SimulatedWeatherSource:
    """
    Local stand-in for a weather service.

    Rains 30% of the time, temperature 20-34 C, humidity 60-89%.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def simulate(self) -> WeatherData:
        is_raining = self.rng.random() > SIMULATED_RAIN_THRESHOLD
        temp_base, temp_span = SIMULATED_TEMPERATURE_RANGE
        hum_base, hum_span = SIMULATED_HUMIDITY_RANGE

        return WeatherData(
            is_raining=is_raining,
            temperature=math.floor(self.rng.random() * temp_span) + temp_base,
            description="light rain" if is_raining else "partly cloudy",
            humidity=math.floor(self.rng.random() * hum_span) + hum_base,
            simulated=True,
        )

    async def get_current_weather(self, lat: float, lng: float) -> WeatherData:
        return self.simulate()


class WeatherClient:
    """
    Client for the OpenWeatherMap current weather API.
    Documentation: https://openweathermap.org/current

    Never raises for service problems: a missing key, an error status,
    a transport failure or an unexpected payload all produce simulated
    weather instead.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        fallback: Optional[SimulatedWeatherSource] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize the weather client.

        Args:
            api_key: OpenWeatherMap API key (settings value if not given)
            base_url: Endpoint URL
            timeout: Request timeout in seconds
            fallback: Simulation used when the service cannot answer
            http_client: Shared HTTP client (one is created per call if not given)
        """
        self.api_key = api_key if api_key is not None else settings.openweather_api_key
        self.base_url = base_url or settings.openweather_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.fallback = fallback or SimulatedWeatherSource()
        self._client = http_client

    async def get_current_weather(self, lat: float, lng: float) -> WeatherData:
        """
        Get current weather for a location.

        Args:
            lat: Latitude
            lng: Longitude

        Returns:
            WeatherData, simulated when the service is unavailable
        """
        if not self.api_key:
            logger.debug("No weather API key configured, simulating weather")
            return self.fallback.simulate()

        params = {
            "lat": lat,
            "lon": lng,
            "appid": self.api_key,
            "units": "metric",
        }

        try:
            if self._client is not None:
                response = await self._client.get(self.base_url, params=params)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(self.base_url, params=params)
        except httpx.HTTPError as e:
            logger.warning(f"Weather request failed: {e}")
            return self.fallback.simulate()

        if not response.is_success:
            logger.warning(f"Weather service returned {response.status_code}")
            return self.fallback.simulate()

        try:
            return self._parse(response.json())
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning(f"Unexpected weather payload: {e}")
            return self.fallback.simulate()

    def _parse(self, data: Dict[str, Any]) -> WeatherData:
        condition = data["weather"][0]
        main = data["main"]

        return WeatherData(
            is_raining="rain" in condition["main"].lower(),
            temperature=round(main["temp"]),
            description=condition.get("description", ""),
            humidity=main.get("humidity", 0),
        )


async def check_weather(
    lat: float,
    lng: float,
    source: Optional[WeatherSource] = None
) -> WeatherData:
    """
    Convenience function to get weather for a report location.

    Args:
        lat: Latitude
        lng: Longitude
        source: Weather source (OpenWeatherMap client if not given)

    Returns:
        WeatherData
    """
    source = source or WeatherClient()
    return await source.get_current_weather(lat, lng)
