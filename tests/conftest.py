"""
Pytest configuration and fixtures
"""
import random
import pytest
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from raastafix.alerts.notifier import Notifier
from raastafix.crowdsource.lifecycle import ReportLifecycle
from raastafix.crowdsource.models import Location, Report, User, UserRole
from raastafix.database.repository import CivicRepository
from raastafix.database.store import create_store
from raastafix.ingestion.weather_client import WeatherData


@pytest.fixture
def repository():
    """Repository over a fresh in-memory database."""
    return CivicRepository(create_store("sqlite://"))


@pytest.fixture
def citizen(repository):
    """Registered citizen who is also the session user."""
    user = User(id="C1", name="Asha", email="asha@example.com", role=UserRole.CITIZEN)
    repository.save_user(user)
    repository.set_current_user(user)
    return user


@pytest.fixture
def authority(repository):
    """Registered authority (not the session user)."""
    user = User(
        id="A1",
        name="Officer Rao",
        email="rao@city.gov.in",
        role=UserRole.AUTHORITY,
        gov_id="GOV-123",
        password="secret",
    )
    repository.save_user(user)
    return user


@pytest.fixture
def notifier(repository):
    return Notifier(repository)


@pytest.fixture
def lifecycle(repository, notifier):
    """Lifecycle engine with a seeded random source."""
    return ReportLifecycle(repository, notifier=notifier, rng=random.Random(42))


@pytest.fixture
def dry_weather():
    return WeatherData(is_raining=False, temperature=30, description="clear sky", humidity=60)


@pytest.fixture
def rainy_weather():
    return WeatherData(is_raining=True, temperature=24, description="light rain", humidity=88)


@pytest.fixture
def bangalore():
    """A location in Bengaluru."""
    return Location(lat=12.9716, lng=77.5946, address="MG Road, Bengaluru")


@pytest.fixture
def fixed_now():
    """Reference time for aggregation tests."""
    return datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_report():
    """Factory for reports with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "id": f"R{counter['n']}",
            "type": "pothole",
            "title": f"Issue {counter['n']}",
            "description": "Something needs fixing",
            "location": Location(lat=12.9716, lng=77.5946, address="MG Road"),
            "reported_by": "Asha",
            "reported_by_email": "asha@example.com",
        }
        data.update(overrides)
        return Report(**data)

    return _make
