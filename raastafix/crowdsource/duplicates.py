"""
Duplicate suppression
An open report of the same type at the same spot blocks a new one.
"""

from typing import Iterable, Optional, Union

from raastafix.core.geo_utils import location_key
from raastafix.crowdsource.models import IssueType, Report, ReportStatus


def find_open_duplicate(
    reports: Iterable[Report],
    report_type: Union[IssueType, str],
    lat: float,
    lng: float
) -> Optional[Report]:
    """
    Find an unresolved report of the same type at the same location.

    Locations match when both coordinates agree to 5 decimal places.
    Resolved reports free the spot again; rejected ones do not.

    Args:
        reports: Existing reports
        report_type: Type of the new report
        lat: Latitude of the new report
        lng: Longitude of the new report

    Returns:
        The first matching report, or None
    """
    key = location_key(lat, lng)
    type_value = getattr(report_type, "value", report_type)

    for report in reports:
        if report.status == ReportStatus.RESOLVED:
            continue
        if report.type.value != type_value:
            continue
        if location_key(report.location.lat, report.location.lng) == key:
            return report
    return None


def duplicate_message(existing: Report) -> str:
    """Text of the notice sent to a citizen whose report was a duplicate."""
    return (
        f'A similar issue ("{existing.title}") has already been reported at this location. '
        f"Your report was not submitted."
    )
