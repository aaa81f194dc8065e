"""
RaastaFix - Analysis Module
Read-only projections over the report collection.
"""

from raastafix.analysis.analytics import (
    AnalyticsData,
    calculate_analytics,
    get_issue_type_stats,
    get_report_trends,
    summarize_statuses,
)
from raastafix.analysis.leaderboard import LeaderboardEntry, build_leaderboard
from raastafix.analysis.export import export_to_csv

__all__ = [
    "AnalyticsData",
    "calculate_analytics",
    "get_issue_type_stats",
    "get_report_trends",
    "summarize_statuses",
    "LeaderboardEntry",
    "build_leaderboard",
    "export_to_csv",
]
