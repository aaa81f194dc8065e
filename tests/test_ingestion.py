"""
Tests for weather, geocoding, geolocation and photo metadata
"""
import asyncio
import random
from unittest.mock import MagicMock, patch

import httpx

from raastafix.core.geo_utils import Coordinates
from raastafix.ingestion.exif_reader import extract_location_from_image
from raastafix.ingestion.geocoding_client import NominatimClient, reverse_geocode
from raastafix.ingestion.geolocation import (
    GeolocationError,
    GeolocationErrorCode,
    LocationSource,
    StaticLocator,
    acquire_location,
)
from raastafix.ingestion.weather_client import SimulatedWeatherSource, WeatherClient, check_weather

from tests.stubs import StubGeocoder, StubWeather


OWM_RAIN = {
    "weather": [{"main": "Rain", "description": "moderate rain"}],
    "main": {"temp": 24.6, "humidity": 91},
}

OWM_CLEAR = {
    "weather": [{"main": "Clear", "description": "clear sky"}],
    "main": {"temp": 31.2, "humidity": 40},
}


def fetch_weather(handler, api_key="test_key"):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = WeatherClient(
                api_key=api_key,
                base_url="https://weather.test/data",
                fallback=SimulatedWeatherSource(random.Random(1)),
                http_client=http,
            )
            return await client.get_current_weather(12.97, 77.59)

    return asyncio.run(run())


class TestWeatherClient:
    """Test suite for the OpenWeatherMap client."""

    def test_rain_detected(self):
        """Test a rain condition is reported as raining."""
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(200, json=OWM_RAIN)

        weather = fetch_weather(handler)

        assert weather.is_raining
        assert weather.temperature == 25
        assert weather.description == "moderate rain"
        assert weather.humidity == 91
        assert not weather.simulated
        assert seen["units"] == "metric"
        assert seen["appid"] == "test_key"

    def test_clear_weather(self):
        """Test a clear condition is not raining."""
        weather = fetch_weather(lambda request: httpx.Response(200, json=OWM_CLEAR))
        assert not weather.is_raining

    def test_error_status_falls_back(self):
        """Test an error status produces simulated weather."""
        weather = fetch_weather(lambda request: httpx.Response(401, json={"cod": 401}))
        assert weather.simulated

    def test_transport_error_falls_back(self):
        """Test a network failure produces simulated weather."""
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        assert fetch_weather(handler).simulated

    def test_bad_payload_falls_back(self):
        """Test an unexpected body produces simulated weather."""
        weather = fetch_weather(lambda request: httpx.Response(200, json={"weather": []}))
        assert weather.simulated

    def test_no_key_skips_request(self):
        """Test no request is made without an API key."""
        handler = MagicMock()
        weather = fetch_weather(handler, api_key="")

        assert weather.simulated
        handler.assert_not_called()

    def test_simulation_ranges(self):
        """Test simulated values stay within their ranges."""
        source = SimulatedWeatherSource(random.Random(3))
        for _ in range(50):
            weather = source.simulate()
            assert 20 <= weather.temperature <= 34
            assert 60 <= weather.humidity <= 89
            assert weather.description == ("light rain" if weather.is_raining else "partly cloudy")


class TestNominatimClient:
    """Test suite for reverse geocoding."""

    def geocode(self, handler):
        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
                client = NominatimClient(base_url="https://geo.test/reverse", http_client=http)
                return await client.reverse_geocode(12.971599, 77.594566)

        return asyncio.run(run())

    def test_display_name(self):
        """Test the display name is returned."""
        def handler(request):
            assert request.headers["User-Agent"]
            assert request.url.params["format"] == "json"
            return httpx.Response(200, json={"display_name": "MG Road, Bengaluru"})

        assert self.geocode(handler) == "MG Road, Bengaluru"

    def test_failure_returns_coordinates(self):
        """Test failures fall back to formatted coordinates."""
        address = self.geocode(lambda request: httpx.Response(500))
        assert address == "12.9716, 77.5946"

    def test_missing_name_returns_coordinates(self):
        """Test a body without a display name falls back."""
        address = self.geocode(lambda request: httpx.Response(200, json={"error": "Unable to geocode"}))
        assert address == "12.9716, 77.5946"


class SlowLocator:
    async def current_position(self):
        await asyncio.sleep(1)
        return Coordinates(lat=0, lng=0)


class DeniedLocator:
    async def current_position(self):
        raise GeolocationError(GeolocationErrorCode.PERMISSION_DENIED)


class BrokenLocator:
    async def current_position(self):
        raise OSError("gps driver crashed")


class TestGeolocation:
    """Test suite for device location with fallback."""

    def test_device_position(self):
        """Test a working device position is used as is."""
        result = asyncio.run(acquire_location(StaticLocator(19.07, 72.87), timeout=1))

        assert result.source == LocationSource.DEVICE
        assert not result.is_fallback
        assert (result.lat, result.lng) == (19.07, 72.87)

    def test_timeout_uses_demo_location(self):
        """Test a slow device falls back to a demo location."""
        result = asyncio.run(acquire_location(SlowLocator(), timeout=0.01, rng=random.Random(5)))

        assert result.source == LocationSource.DEMO
        assert result.is_fallback
        assert "timed out" in result.message
        assert result.message.endswith("Demo location used for this report.")

    def test_permission_denied(self):
        """Test a denied permission falls back with its own message."""
        result = asyncio.run(acquire_location(DeniedLocator(), timeout=1))

        assert result.is_fallback
        assert result.message.startswith("Location access denied.")

    def test_locator_crash_uses_demo_location(self):
        """Test an unexpected locator error still yields a demo location."""
        result = asyncio.run(acquire_location(BrokenLocator(), timeout=1))

        assert result.source == LocationSource.DEMO
        assert result.is_fallback
        assert result.message.startswith("Position unavailable.")

    def test_no_locator(self):
        """Test hosts without a locator get a demo location."""
        result = asyncio.run(acquire_location(None, timeout=1))
        assert result.source == LocationSource.DEMO


class TestExifReader:
    """Test suite for photo GPS extraction."""

    def mock_image(self, mock_open, gps):
        img = MagicMock()
        exif = MagicMock()
        exif.get_ifd.return_value = gps
        img.getexif.return_value = exif
        mock_open.return_value.__enter__.return_value = img

    @patch("raastafix.ingestion.exif_reader.Image.open")
    def test_gps_tags(self, mock_open):
        """Test degrees/minutes/seconds are converted with hemisphere signs."""
        self.mock_image(mock_open, {
            1: "S",
            2: (12.0, 30.0, 0.0),
            3: "W",
            4: (77.0, 36.0, 36.0),
        })

        coordinates = extract_location_from_image(b"jpeg")

        assert coordinates.lat == -12.5
        assert round(coordinates.lng, 4) == -77.61

    @patch("raastafix.ingestion.exif_reader.Image.open")
    def test_zero_position_ignored(self, mock_open):
        """Test a 0,0 position is treated as missing."""
        self.mock_image(mock_open, {1: "N", 2: (0, 0, 0), 3: "E", 4: (0, 0, 0)})
        assert extract_location_from_image(b"jpeg") is None

    @patch("raastafix.ingestion.exif_reader.Image.open")
    def test_no_gps_block(self, mock_open):
        """Test images without GPS tags give no location."""
        self.mock_image(mock_open, {})
        assert extract_location_from_image(b"jpeg") is None

    def test_not_an_image(self):
        """Test unreadable bytes give no location."""
        assert extract_location_from_image(b"definitely not an image") is None


class TestConvenienceFunctions:
    """Test suite for module-level helpers."""

    def test_check_weather_uses_source(self):
        """Test check_weather delegates to the given source."""
        source = StubWeather(is_raining=True)
        weather = asyncio.run(check_weather(12.97, 77.59, source=source))

        assert weather.is_raining
        assert source.calls == 1

    def test_reverse_geocode_uses_geocoder(self):
        """Test reverse_geocode delegates to the given geocoder."""
        geocoder = StubGeocoder("Park Street, Kolkata")
        assert asyncio.run(reverse_geocode(22.55, 88.35, geocoder=geocoder)) == "Park Street, Kolkata"
