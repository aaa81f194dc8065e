"""
Input validation for new reports
Checked before any side effect so a failed submission leaves no trace.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from raastafix.core.geo_utils import is_valid_coordinate
from raastafix.crowdsource.models import IssueType, Location

logger = logging.getLogger(__name__)


class ReportValidationError(ValueError):
    """A submission is missing a required field or has an invalid one."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


@dataclass
class NewReportInput:
    """What a citizen fills in on the report form."""
    type: str
    title: str
    description: str
    image_url: Optional[str] = None


@dataclass
class ValidatedReport:
    """A submission that passed validation, with text trimmed."""
    type: IssueType
    title: str
    description: str
    image_url: str
    location: Location


def validate_form(data: NewReportInput) -> IssueType:
    """
    Check the form fields a citizen must fill in.

    Args:
        data: Form input

    Returns:
        The parsed issue type

    Raises:
        ReportValidationError: When a required field is missing or invalid
    """
    title = (data.title or "").strip()
    description = (data.description or "").strip()

    if not data.type or not title or not description:
        raise ReportValidationError("Please fill in all required fields")

    try:
        issue_type = IssueType(data.type)
    except ValueError:
        raise ReportValidationError(f"Unknown issue type: {data.type}", field="type")

    if not data.image_url:
        raise ReportValidationError(
            "Please upload a photo of the issue. Photo is mandatory.",
            field="image",
        )

    return issue_type


def validate_new_report(
    data: NewReportInput,
    location: Optional[Location]
) -> ValidatedReport:
    """
    Validate a submission including its location.

    Args:
        data: Form input
        location: Resolved report location

    Returns:
        ValidatedReport

    Raises:
        ReportValidationError: When a required field is missing or invalid
    """
    issue_type = validate_form(data)

    if location is None:
        raise ReportValidationError("A location is required", field="location")

    if not is_valid_coordinate(location.lat, location.lng):
        raise ReportValidationError(
            f"Invalid coordinates: {location.lat}, {location.lng}",
            field="location",
        )

    return ValidatedReport(
        type=issue_type,
        title=data.title.strip(),
        description=data.description.strip(),
        image_url=data.image_url,
        location=location,
    )
