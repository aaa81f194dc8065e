"""
GPS extraction from photo metadata
Reads the EXIF GPS block of an uploaded image with Pillow.
"""

import io
import logging
from typing import Any, Optional

from PIL import ExifTags, Image, UnidentifiedImageError

from raastafix.core.geo_utils import Coordinates, is_valid_coordinate

logger = logging.getLogger(__name__)

# GPS IFD tag numbers
GPS_LATITUDE_REF = 1
GPS_LATITUDE = 2
GPS_LONGITUDE_REF = 3
GPS_LONGITUDE = 4


def _to_degrees(value: Any) -> Optional[float]:
    """Convert an EXIF (degrees, minutes, seconds) triple or scalar to decimal degrees."""
    try:
        if isinstance(value, (list, tuple)):
            if len(value) != 3:
                return None
            degrees, minutes, seconds = (float(v) for v in value)
            return degrees + minutes / 60.0 + seconds / 3600.0
        return float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None


def _ref(value: Any, default: str) -> str:
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    return (value or default).strip().upper()


def extract_location_from_image(image_data: bytes) -> Optional[Coordinates]:
    """
    Extract GPS coordinates embedded in an image.

    Args:
        image_data: Raw image bytes

    Returns:
        Coordinates, or None when the image has no usable GPS tags
    """
    try:
        with Image.open(io.BytesIO(image_data)) as img:
            exif = img.getexif()
            gps = exif.get_ifd(ExifTags.IFD.GPSInfo) if exif else None
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning(f"Could not read image metadata: {e}")
        return None

    if not gps:
        return None

    lat = _to_degrees(gps.get(GPS_LATITUDE))
    lng = _to_degrees(gps.get(GPS_LONGITUDE))
    if lat is None or lng is None:
        return None

    if _ref(gps.get(GPS_LATITUDE_REF), "N") == "S":
        lat = -lat
    if _ref(gps.get(GPS_LONGITUDE_REF), "E") == "W":
        lng = -lng

    # Cameras without a fix often write zeros
    if (lat == 0 and lng == 0) or not is_valid_coordinate(lat, lng):
        return None

    return Coordinates(lat=lat, lng=lng)
