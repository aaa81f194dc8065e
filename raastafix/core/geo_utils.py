"""
Geographic utility functions for RaastaFix
Coordinate formatting, spot matching and demo locations.
"""

import random
from dataclasses import dataclass
from typing import Optional, Tuple

from raastafix.core.constants import (
    DEMO_LOCATIONS,
    DEMO_LOCATION_JITTER,
    DUPLICATE_KEY_PRECISION,
)


@dataclass
class Coordinates:
    """A latitude/longitude pair."""
    lat: float
    lng: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.lat, self.lng)


def location_key(lat: float, lng: float, precision: int = DUPLICATE_KEY_PRECISION) -> str:
    """
    Build the key used to decide whether two reports point at the same spot.

    Args:
        lat: Latitude in degrees
        lng: Longitude in degrees
        precision: Decimal places kept

    Returns:
        Key like "12.97100,77.59500"
    """
    return f"{lat:.{precision}f},{lng:.{precision}f}"


def format_coordinates(lat: float, lng: float, precision: int = 4) -> str:
    """Format coordinates as a human readable "lat, lng" string."""
    return f"{lat:.{precision}f}, {lng:.{precision}f}"


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """Check that latitude and longitude are within valid ranges."""
    return -90 <= lat <= 90 and -180 <= lng <= 180


def demo_location(rng: Optional[random.Random] = None) -> Coordinates:
    """
    Pick a fallback location in one of the demo cities.

    The city is chosen uniformly and the point is jittered by up to
    half of DEMO_LOCATION_JITTER in each axis.

    Args:
        rng: Random source (unseeded if not given)

    Returns:
        Coordinates near a demo city
    """
    rng = rng or random.Random()
    _, lat, lng = DEMO_LOCATIONS[int(rng.random() * len(DEMO_LOCATIONS))]

    return Coordinates(
        lat=lat + (rng.random() - 0.5) * DEMO_LOCATION_JITTER,
        lng=lng + (rng.random() - 0.5) * DEMO_LOCATION_JITTER,
    )
