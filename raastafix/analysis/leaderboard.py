"""
Citizen leaderboard
Ranks reporters by how many issues they raised this calendar month.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from raastafix.core.constants import LEADERBOARD_SIZE
from raastafix.crowdsource.models import Report
from raastafix.analysis.analytics import is_same_month, local_now


@dataclass
class LeaderboardEntry:
    """One reporter's standing."""
    email: str
    name: str
    monthly_reports: int = 0
    total_reports: int = 0
    rewards_earned: int = 0
    reports: List[Report] = field(default_factory=list)

    @property
    def recent_reports(self) -> List[Report]:
        return sorted(self.reports, key=lambda r: r.reported_at, reverse=True)[:3]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "email": self.email,
            "name": self.name,
            "monthly_reports": self.monthly_reports,
            "total_reports": self.total_reports,
            "rewards_earned": self.rewards_earned,
            "recent_reports": [
                {"id": r.id, "title": r.title, "status": r.status.value}
                for r in self.recent_reports
            ],
        }


def build_leaderboard(
    reports: Iterable[Report],
    now: Optional[datetime] = None,
    limit: int = LEADERBOARD_SIZE
) -> List[LeaderboardEntry]:
    """
    Rank reporters.

    Sorted by reports this month, then lifetime reports, both descending.
    Rewards count reports holding a reward while in progress. Reports
    without a reporter name or email are ignored.

    Args:
        reports: All reports
        now: Reference time for "this month" (local now if not given)
        limit: Maximum entries returned

    Returns:
        Ranked entries
    """
    now = now or local_now()
    entries: Dict[str, LeaderboardEntry] = {}

    for report in reports:
        if not report.reported_by_email or not report.reported_by:
            continue

        entry = entries.get(report.reported_by_email)
        if entry is None:
            entry = LeaderboardEntry(email=report.reported_by_email, name=report.reported_by)
            entries[report.reported_by_email] = entry

        entry.reports.append(report)
        entry.total_reports += 1
        if is_same_month(report.reported_at, now):
            entry.monthly_reports += 1
        if report.has_active_reward:
            entry.rewards_earned += 1

    ranked = sorted(
        entries.values(),
        key=lambda e: (e.monthly_reports, e.total_reports),
        reverse=True,
    )
    return ranked[:limit]
