"""
RaastaFix - Crowdsource Module
Citizen reports, their review lifecycle and accounts.
"""

from raastafix.crowdsource.models import (
    IssueType,
    Location,
    Notification,
    Report,
    ReportPriority,
    ReportStatus,
    RewardType,
    User,
    UserRole,
)
from raastafix.crowdsource.validation import (
    NewReportInput,
    ReportValidationError,
    validate_new_report,
)
from raastafix.crowdsource.hazard import is_rainy_hazard, determine_priority
from raastafix.crowdsource.duplicates import find_open_duplicate
from raastafix.crowdsource.lifecycle import (
    LifecycleResult,
    RefusalReason,
    ReportLifecycle,
)
from raastafix.crowdsource.intake import IntakeResult, ReportIntake
from raastafix.crowdsource.accounts import (
    AccountService,
    AccountValidationError,
    SignUpRequest,
)

__all__ = [
    # Records
    "IssueType",
    "Location",
    "Notification",
    "Report",
    "ReportPriority",
    "ReportStatus",
    "RewardType",
    "User",
    "UserRole",
    # Validation
    "NewReportInput",
    "ReportValidationError",
    "validate_new_report",
    # Policies
    "is_rainy_hazard",
    "determine_priority",
    "find_open_duplicate",
    # Lifecycle
    "LifecycleResult",
    "RefusalReason",
    "ReportLifecycle",
    "IntakeResult",
    "ReportIntake",
    # Accounts
    "AccountService",
    "AccountValidationError",
    "SignUpRequest",
]
