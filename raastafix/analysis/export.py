"""
CSV export of reports
"""

import csv
import io
from datetime import datetime
from typing import Iterable, Optional

from raastafix.core.constants import CSV_HEADERS
from raastafix.crowdsource.models import Report

DEFAULT_FILENAME = "raastafix-reports.csv"


def _format_time(moment: Optional[datetime]) -> str:
    if moment is None:
        return "N/A"
    return moment.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def export_to_csv(reports: Iterable[Report]) -> str:
    """
    Flatten reports into CSV text.

    Columns: ID, Type, Title, Status, Priority, Location, Reported By,
    Reported At, Resolved At, Upvotes. Times are local; unresolved
    reports show "N/A".
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)

    for report in reports:
        writer.writerow([
            report.id,
            report.type.value,
            report.title,
            report.status.value,
            report.priority.value,
            report.location.address,
            report.reported_by,
            _format_time(report.reported_at),
            _format_time(report.resolved_at),
            str(report.upvotes),
        ])

    return buffer.getvalue().rstrip("\n")
