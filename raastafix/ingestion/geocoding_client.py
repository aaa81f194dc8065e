"""
Reverse geocoding via OpenStreetMap Nominatim
Turns report coordinates into a display address.
"""

import logging
from typing import Optional, Protocol

import httpx

from raastafix.core.config import settings
from raastafix.core.geo_utils import format_coordinates

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    """Anything that can name a point on the map."""

    async def reverse_geocode(self, lat: float, lng: float) -> str:
        ...


class NominatimClient:
    """
    Client for the Nominatim reverse geocoding endpoint.
    Documentation: https://nominatim.org/release-docs/latest/api/Reverse/

    Falls back to "lat, lng" (4 decimals) on any failure.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.base_url = base_url or settings.nominatim_url
        self.user_agent = user_agent or settings.nominatim_user_agent
        self.timeout = timeout or settings.http_timeout_seconds
        self._client = http_client

    async def reverse_geocode(self, lat: float, lng: float) -> str:
        """
        Look up the address nearest to a point.

        Args:
            lat: Latitude
            lng: Longitude

        Returns:
            Display address, or formatted coordinates on failure
        """
        fallback = format_coordinates(lat, lng)
        params = {"lat": lat, "lon": lng, "format": "json"}
        headers = {"User-Agent": self.user_agent}

        try:
            if self._client is not None:
                response = await self._client.get(self.base_url, params=params, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(self.base_url, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"Reverse geocoding failed: {e}")
            return fallback

        if not response.is_success:
            logger.warning(f"Nominatim returned {response.status_code}")
            return fallback

        try:
            data = response.json()
        except ValueError:
            return fallback

        if not isinstance(data, dict):
            return fallback
        return data.get("display_name") or fallback


async def reverse_geocode(lat: float, lng: float, geocoder: Optional[Geocoder] = None) -> str:
    """Convenience function to name a point with the default client."""
    geocoder = geocoder or NominatimClient()
    return await geocoder.reverse_geocode(lat, lng)
