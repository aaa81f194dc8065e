"""
Lifecycle events emitted by report transitions
Consumed by the notifier; the state machine itself never delivers messages.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from raastafix.crowdsource.models import Report, RewardType, utcnow


@dataclass
class LifecycleEvent:
    """Base class for everything a transition can emit."""
    report: Report
    occurred_at: datetime = field(default_factory=utcnow, kw_only=True)

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "report_id": self.report.id,
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass
class ReportSubmitted(LifecycleEvent):
    """A new report was stored."""


@dataclass
class DuplicateSuppressed(LifecycleEvent):
    """A submission was dropped because `report` already covers it."""
    submitter_email: str


@dataclass
class ReportApproved(LifecycleEvent):
    """An authority accepted a report and granted a reward."""
    actor_name: str
    reward_type: RewardType


@dataclass
class ReportRejected(LifecycleEvent):
    """An authority turned a report down."""
    actor_name: str
    reason: Optional[str] = None


@dataclass
class ReportResolved(LifecycleEvent):
    """An authority marked the issue as fixed."""
    actor_name: str
