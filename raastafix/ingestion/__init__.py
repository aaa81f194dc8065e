"""
RaastaFix - External Data Sources
Weather, reverse geocoding, device location and photo metadata.
"""

from raastafix.ingestion.weather_client import (
    WeatherClient,
    WeatherData,
    WeatherSource,
    SimulatedWeatherSource,
    check_weather,
)
from raastafix.ingestion.geocoding_client import (
    Geocoder,
    NominatimClient,
    reverse_geocode,
)
from raastafix.ingestion.geolocation import (
    DeviceLocator,
    GeolocationError,
    GeolocationErrorCode,
    LocationResult,
    LocationSource,
    StaticLocator,
    UnavailableLocator,
    acquire_location,
)
from raastafix.ingestion.exif_reader import extract_location_from_image

__all__ = [
    # Weather
    "WeatherClient",
    "WeatherData",
    "WeatherSource",
    "SimulatedWeatherSource",
    "check_weather",
    # Geocoding
    "Geocoder",
    "NominatimClient",
    "reverse_geocode",
    # Geolocation
    "DeviceLocator",
    "GeolocationError",
    "GeolocationErrorCode",
    "LocationResult",
    "LocationSource",
    "StaticLocator",
    "UnavailableLocator",
    "acquire_location",
    # Photo metadata
    "extract_location_from_image",
]
