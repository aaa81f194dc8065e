"""
Device geolocation with demo-location fallback
A report always gets coordinates: live ones when the device answers in
time, otherwise a point near one of the demo cities.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Protocol

from raastafix.core.config import settings
from raastafix.core.geo_utils import Coordinates, demo_location

logger = logging.getLogger(__name__)


class GeolocationErrorCode(int, Enum):
    """Failure codes, numbered like the W3C geolocation API."""
    UNSUPPORTED = 0
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3


FALLBACK_MESSAGES: Dict[GeolocationErrorCode, str] = {
    GeolocationErrorCode.PERMISSION_DENIED: (
        "Location access denied. Please allow location permissions and try again."
    ),
    GeolocationErrorCode.POSITION_UNAVAILABLE: (
        "Position unavailable. Please check your device location settings."
    ),
    GeolocationErrorCode.TIMEOUT: (
        "Location detection timed out. Move outdoors or check device settings."
    ),
    GeolocationErrorCode.UNSUPPORTED: (
        "Unable to fetch your location. Using demo coordinates."
    ),
}


class GeolocationError(Exception):
    """Raised by a locator that cannot produce a position."""

    def __init__(self, code: GeolocationErrorCode, message: str = ""):
        super().__init__(message or FALLBACK_MESSAGES[code])
        self.code = code


class LocationSource(str, Enum):
    """Where report coordinates came from."""
    EXIF = "exif"
    DEVICE = "device"
    DEMO = "demo"


@dataclass
class LocationResult:
    """Coordinates plus how they were obtained."""
    coordinates: Coordinates
    source: LocationSource
    is_fallback: bool = False
    message: Optional[str] = None

    @property
    def lat(self) -> float:
        return self.coordinates.lat

    @property
    def lng(self) -> float:
        return self.coordinates.lng

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lat": self.lat,
            "lng": self.lng,
            "source": self.source.value,
            "is_fallback": self.is_fallback,
            "message": self.message,
        }


class DeviceLocator(Protocol):
    """Anything that can report the device's current position."""

    async def current_position(self) -> Coordinates:
        ...


class StaticLocator:
    """Locator for a position already known to the caller (e.g. sent by a client)."""

    def __init__(self, lat: float, lng: float):
        self.coordinates = Coordinates(lat=lat, lng=lng)

    async def current_position(self) -> Coordinates:
        return self.coordinates


class UnavailableLocator:
    """Locator for hosts without positioning hardware."""

    async def current_position(self) -> Coordinates:
        raise GeolocationError(GeolocationErrorCode.UNSUPPORTED, "Geolocation not supported")


async def acquire_location(
    locator: Optional[DeviceLocator] = None,
    timeout: Optional[float] = None,
    rng: Optional[random.Random] = None
) -> LocationResult:
    """
    Get the device position, falling back to a demo location.

    Args:
        locator: Device position provider
        timeout: Seconds to wait for the device (settings value if not given)
        rng: Random source for the demo location

    Returns:
        LocationResult; `is_fallback` is set when demo coordinates were used
    """
    locator = locator or UnavailableLocator()
    timeout = timeout if timeout is not None else settings.geolocation_timeout_seconds

    try:
        coordinates = await asyncio.wait_for(locator.current_position(), timeout=timeout)
        return LocationResult(coordinates=coordinates, source=LocationSource.DEVICE)
    except asyncio.TimeoutError:
        code = GeolocationErrorCode.TIMEOUT
    except GeolocationError as e:
        code = e.code
    except Exception as e:
        logger.warning(f"Device locator failed: {e}")
        code = GeolocationErrorCode.POSITION_UNAVAILABLE

    message = f"{FALLBACK_MESSAGES[code]} Demo location used for this report."
    logger.info(f"Geolocation failed ({code.name}), using demo location")

    return LocationResult(
        coordinates=demo_location(rng),
        source=LocationSource.DEMO,
        is_fallback=True,
        message=message,
    )
