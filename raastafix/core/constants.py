"""
RaastaFix - Constants and Reference Data
Static values used throughout the application.
"""

from typing import Dict, List, Tuple

# =============================================================================
# STORAGE KEYS
# =============================================================================

REPORTS_KEY = "raastafix_reports"
USERS_KEY = "raastafix_users"
CURRENT_USER_KEY = "raastafix_current_user"

# =============================================================================
# ISSUE TYPES
# =============================================================================

ISSUE_TYPE_LABELS: Dict[str, str] = {
    "pothole": "Pothole / Road Damage",
    "streetlight": "Broken Streetlight",
    "water-leak": "Water Leakage",
    "waste": "Illegal Waste Dumping",
    "manhole": "Open Manhole / Safety Hazard",
}

ISSUE_TYPES: List[str] = list(ISSUE_TYPE_LABELS)

# Issue types that become dangerous when it rains
RAIN_HAZARD_TYPES: Tuple[str, ...] = ("pothole", "manhole", "water-leak")

# =============================================================================
# REWARDS AND REPUTATION
# =============================================================================

REWARD_TYPES: Tuple[str, ...] = ("voucher", "tshirt", "goodies")

REWARD_PHRASES: Dict[str, str] = {
    "voucher": "a voucher",
    "tshirt": "a t-shirt",
    "goodies": "goodies",
}

INITIAL_REPUTATION = 100
SUBMISSION_REPUTATION = 10
RESOLUTION_REPUTATION = 25

DEFAULT_REJECTION_REASON = "Report does not meet requirements"
DEFAULT_REPORTER_EMAIL = "user@example.com"

# =============================================================================
# LOCATION
# =============================================================================

# (name, latitude, longitude) used when live geolocation is unavailable
DEMO_LOCATIONS: List[Tuple[str, float, float]] = [
    ("New Delhi", 28.6139, 77.2090),
    ("Mumbai", 19.0760, 72.8777),
    ("Bangalore", 12.9716, 77.5946),
    ("Kolkata", 22.5726, 88.3639),
    ("Chennai", 13.0827, 80.2707),
]

# Total width of the random offset applied to demo coordinates (degrees)
DEMO_LOCATION_JITTER = 0.05

# Decimal places used to match reports at the same spot (~1.1 m)
DUPLICATE_KEY_PRECISION = 5

# =============================================================================
# WEATHER SIMULATION
# =============================================================================

SIMULATED_RAIN_THRESHOLD = 0.7
SIMULATED_TEMPERATURE_RANGE: Tuple[int, int] = (20, 15)  # base, span
SIMULATED_HUMIDITY_RANGE: Tuple[int, int] = (60, 30)  # base, span

# =============================================================================
# AGGREGATION
# =============================================================================

LEADERBOARD_SIZE = 20
TREND_DAYS = 7

CSV_HEADERS: List[str] = [
    "ID",
    "Type",
    "Title",
    "Status",
    "Priority",
    "Location",
    "Reported By",
    "Reported At",
    "Resolved At",
    "Upvotes",
]
