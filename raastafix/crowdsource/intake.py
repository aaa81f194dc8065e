"""
Report intake
Gathers everything a report needs from outside the process (position,
address, weather) and hands a complete submission to the lifecycle engine.

Each external step resolves to a fallback value on failure, so a
submission never waits on the network longer than the configured timeouts.
"""

import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, Optional

from raastafix.crowdsource.lifecycle import LifecycleResult, ReportLifecycle
from raastafix.crowdsource.models import Location, User
from raastafix.crowdsource.validation import NewReportInput, validate_form
from raastafix.ingestion.exif_reader import extract_location_from_image
from raastafix.ingestion.geocoding_client import Geocoder, NominatimClient
from raastafix.ingestion.geolocation import (
    DeviceLocator,
    LocationResult,
    LocationSource,
    acquire_location,
)
from raastafix.ingestion.weather_client import WeatherClient, WeatherData, WeatherSource

logger = logging.getLogger(__name__)


@dataclass
class IntakeResult:
    """Lifecycle outcome plus the context gathered for it."""
    result: LifecycleResult
    location: LocationResult
    weather: Optional[WeatherData] = None

    @property
    def ok(self) -> bool:
        return self.result.ok

    def to_dict(self) -> Dict[str, Any]:
        data = self.result.to_dict()
        data["location"] = self.location.to_dict()
        data["weather"] = self.weather.to_dict() if self.weather else None
        return data


class ReportIntake:
    """
    Async front door for new reports.

    Location priority: GPS tags in the photo, then the device, then a
    demo location (flagged as a fallback).
    """

    def __init__(
        self,
        lifecycle: ReportLifecycle,
        weather_source: Optional[WeatherSource] = None,
        geocoder: Optional[Geocoder] = None,
        locator: Optional[DeviceLocator] = None,
        rng: Optional[random.Random] = None,
        geolocation_timeout: Optional[float] = None
    ):
        """
        Initialize intake.

        Args:
            lifecycle: Engine that stores the report
            weather_source: Current weather provider
            geocoder: Reverse geocoder
            locator: Default device locator
            rng: Random source for demo locations
            geolocation_timeout: Seconds to wait for the device
        """
        self.lifecycle = lifecycle
        self.weather_source = weather_source or WeatherClient()
        self.geocoder = geocoder or NominatimClient()
        self.locator = locator
        self.rng = rng or random.Random()
        self.geolocation_timeout = geolocation_timeout

    async def resolve_location(
        self,
        image_data: Optional[bytes] = None,
        locator: Optional[DeviceLocator] = None
    ) -> LocationResult:
        """
        Work out where a report was taken.

        Args:
            image_data: Raw photo bytes (checked for GPS tags)
            locator: Device locator overriding the default

        Returns:
            LocationResult
        """
        if image_data:
            coordinates = extract_location_from_image(image_data)
            if coordinates is not None:
                logger.debug(f"Location from photo metadata: {coordinates.as_tuple()}")
                return LocationResult(coordinates=coordinates, source=LocationSource.EXIF)

        return await acquire_location(
            locator or self.locator,
            timeout=self.geolocation_timeout,
            rng=self.rng,
        )

    async def submit(
        self,
        data: NewReportInput,
        reporter: User,
        image_data: Optional[bytes] = None,
        locator: Optional[DeviceLocator] = None
    ) -> IntakeResult:
        """
        Validate, locate, enrich and store a report.

        Args:
            data: Form input
            reporter: Submitting user
            image_data: Raw photo bytes
            locator: Device locator for this submission

        Returns:
            IntakeResult

        Raises:
            ReportValidationError: When the form is incomplete
        """
        validate_form(data)

        location = await self.resolve_location(image_data, locator)

        # Skip the network round trips when the spot is already reported
        existing = self.lifecycle.find_duplicate(data.type, location.lat, location.lng)
        if existing is not None:
            return IntakeResult(
                result=self.lifecycle.refuse_duplicate(existing, reporter),
                location=location,
            )

        address = await self.geocoder.reverse_geocode(location.lat, location.lng)
        weather = await self.weather_source.get_current_weather(location.lat, location.lng)

        result = self.lifecycle.submit(
            data,
            reporter,
            Location(lat=location.lat, lng=location.lng, address=address),
            weather,
        )
        return IntakeResult(result=result, location=location, weather=weather)
