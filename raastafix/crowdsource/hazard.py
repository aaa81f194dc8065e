"""
Weather hazard classification
Rain turns some issue types into an immediate danger to road users.
"""

from typing import Union

from raastafix.core.constants import RAIN_HAZARD_TYPES
from raastafix.crowdsource.models import IssueType, ReportPriority
from raastafix.ingestion.weather_client import WeatherData


def _type_value(report_type: Union[IssueType, str]) -> str:
    return getattr(report_type, "value", report_type)


def is_rainy_hazard(report_type: Union[IssueType, str], weather: WeatherData) -> bool:
    """
    Check whether an issue is dangerous under current weather.

    Args:
        report_type: Issue type
        weather: Current weather at the report location

    Returns:
        True when it is raining and the type is pothole, manhole or water-leak
    """
    if not weather.is_raining:
        return False
    return _type_value(report_type) in RAIN_HAZARD_TYPES


def determine_priority(report_type: Union[IssueType, str], is_hazard: bool) -> ReportPriority:
    """Initial priority: hazards are critical, open manholes high, the rest medium."""
    if is_hazard:
        return ReportPriority.CRITICAL
    if _type_value(report_type) == IssueType.MANHOLE.value:
        return ReportPriority.HIGH
    return ReportPriority.MEDIUM
