"""
Report analytics
Read-only summaries over the report collection: headline analytics,
per-type statistics, a seven day trend and status counts.
"""

import math
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from raastafix.core.constants import ISSUE_TYPES, TREND_DAYS
from raastafix.crowdsource.models import Report, ReportStatus


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def local_now() -> datetime:
    """Current local time (aware)."""
    return datetime.now().astimezone()


def is_same_month(moment: datetime, now: datetime) -> bool:
    """Check whether two instants fall in the same local calendar month."""
    moment = moment.astimezone()
    now = now.astimezone()
    return moment.year == now.year and moment.month == now.month


@dataclass
class AnalyticsData:
    """Headline numbers for the analytics dashboard."""
    total_reports: int
    resolved_reports: int
    avg_resolution_time: int  # hours
    top_issue_type: str
    reports_this_month: int
    resolution_rate: int  # percent

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_reports": self.total_reports,
            "resolved_reports": self.resolved_reports,
            "avg_resolution_time": self.avg_resolution_time,
            "top_issue_type": self.top_issue_type,
            "reports_this_month": self.reports_this_month,
            "resolution_rate": self.resolution_rate,
        }


def calculate_analytics(
    reports: Iterable[Report],
    now: Optional[datetime] = None
) -> AnalyticsData:
    """
    Calculate headline analytics.

    Args:
        reports: Reports to summarize
        now: Reference time for "this month" (local now if not given)

    Returns:
        AnalyticsData; all zeros and top type "none" for no reports
    """
    reports = list(reports)
    if not reports:
        return AnalyticsData(
            total_reports=0,
            resolved_reports=0,
            avg_resolution_time=0,
            top_issue_type="none",
            reports_this_month=0,
            resolution_rate=0,
        )

    now = now or local_now()
    resolved = [r for r in reports if r.status == ReportStatus.RESOLVED]

    reports_this_month = sum(1 for r in reports if is_same_month(r.reported_at, now))

    total_hours = 0.0
    for report in resolved:
        if report.resolved_at:
            total_hours += (report.resolved_at - report.reported_at).total_seconds() / 3600

    avg_resolution_time = round_half_up(total_hours / len(resolved)) if resolved else 0

    # Counter keeps first-seen order, so ties go to the earliest type
    type_counts = Counter(r.type.value for r in reports)
    top_issue_type, top_count = "none", 0
    for issue_type, count in type_counts.items():
        if count > top_count:
            top_issue_type, top_count = issue_type, count

    return AnalyticsData(
        total_reports=len(reports),
        resolved_reports=len(resolved),
        avg_resolution_time=avg_resolution_time,
        top_issue_type=top_issue_type,
        reports_this_month=reports_this_month,
        resolution_rate=round_half_up(len(resolved) / len(reports) * 100),
    )


def get_issue_type_stats(reports: Iterable[Report]) -> Dict[str, Dict[str, int]]:
    """
    Count reports per issue type.

    Every non-resolved report (including rejected) counts as pending.

    Returns:
        {type: {"total", "resolved", "pending"}} for every issue type
    """
    stats = {t: {"total": 0, "resolved": 0, "pending": 0} for t in ISSUE_TYPES}

    for report in reports:
        entry = stats[report.type.value]
        entry["total"] += 1
        if report.status == ReportStatus.RESOLVED:
            entry["resolved"] += 1
        else:
            entry["pending"] += 1

    return stats


def get_report_trends(
    reports: Iterable[Report],
    now: Optional[datetime] = None,
    days: int = TREND_DAYS
) -> List[Dict[str, Any]]:
    """
    Daily submission counts for the trailing week, oldest first.

    A report lands in the bucket of the number of whole days elapsed
    since it was submitted; the last bucket is today.

    Args:
        reports: Reports to count
        now: Reference time (local now if not given)
        days: Number of buckets

    Returns:
        List of {"date": "Oct 19", "count": n}
    """
    now = (now or local_now()).astimezone()
    buckets = []
    for i in range(days):
        day = (now - timedelta(days=days - 1 - i)).astimezone()
        buckets.append({"date": f"{day:%b} {day.day}", "count": 0})

    for report in reports:
        elapsed = (now - report.reported_at.astimezone()).total_seconds()
        days_ago = math.floor(elapsed / 86400)
        if 0 <= days_ago < days:
            buckets[days - 1 - days_ago]["count"] += 1

    return buckets


def summarize_statuses(reports: Iterable[Report]) -> Dict[str, int]:
    """Counts by status plus the number of weather hazards."""
    reports = list(reports)
    by_status = Counter(r.status for r in reports)

    return {
        "total": len(reports),
        "pending": by_status[ReportStatus.PENDING],
        "in_progress": by_status[ReportStatus.IN_PROGRESS],
        "resolved": by_status[ReportStatus.RESOLVED],
        "rejected": by_status[ReportStatus.REJECTED],
        "critical": sum(1 for r in reports if r.is_rainy_hazard),
    }
