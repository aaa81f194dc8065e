"""
RaastaFix - Core Utilities
Central configuration, logging, and utility functions.
"""

from raastafix.core.config import settings
from raastafix.core.constants import (
    ISSUE_TYPES,
    RAIN_HAZARD_TYPES,
    REWARD_TYPES,
    DEMO_LOCATIONS,
)
from raastafix.core.geo_utils import (
    Coordinates,
    location_key,
    format_coordinates,
    demo_location,
)

__all__ = [
    "settings",
    "ISSUE_TYPES",
    "RAIN_HAZARD_TYPES",
    "REWARD_TYPES",
    "DEMO_LOCATIONS",
    "Coordinates",
    "location_key",
    "format_coordinates",
    "demo_location",
]
