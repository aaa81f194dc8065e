"""
Report lifecycle and triage engine
Creates reports and moves them through the review state machine.

    pending --approve--> in-progress --resolve--> resolved
    pending --reject---> rejected

Resolved and rejected are terminal. Only authority users may triage.
Refused operations return a LifecycleResult explaining why instead of
raising, so callers can tell "nothing happened" from a failure.
"""

import logging
import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from raastafix.core.constants import (
    DEFAULT_REJECTION_REASON,
    RESOLUTION_REPUTATION,
    REWARD_TYPES,
    SUBMISSION_REPUTATION,
)
from raastafix.crowdsource.duplicates import find_open_duplicate
from raastafix.crowdsource.events import (
    DuplicateSuppressed,
    LifecycleEvent,
    ReportApproved,
    ReportRejected,
    ReportResolved,
    ReportSubmitted,
)
from raastafix.crowdsource.hazard import determine_priority, is_rainy_hazard
from raastafix.crowdsource.models import (
    Location,
    Report,
    ReportStatus,
    Reward,
    RewardType,
    User,
    utcnow,
)
from raastafix.crowdsource.validation import NewReportInput, validate_new_report
from raastafix.ingestion.weather_client import WeatherData

if TYPE_CHECKING:
    from raastafix.alerts.notifier import Notifier
    from raastafix.database.repository import CivicRepository

logger = logging.getLogger(__name__)


class RefusalReason(str, Enum):
    """Why an operation left the store unchanged."""
    NOT_AUTHORIZED = "not_authorized"
    NOT_FOUND = "not_found"
    INVALID_TRANSITION = "invalid_transition"
    DUPLICATE = "duplicate"


# Source state required by each triage action
TRANSITIONS: Dict[str, tuple] = {
    "approve": (ReportStatus.PENDING, ReportStatus.IN_PROGRESS),
    "reject": (ReportStatus.PENDING, ReportStatus.REJECTED),
    "resolve": (ReportStatus.IN_PROGRESS, ReportStatus.RESOLVED),
}


@dataclass
class LifecycleResult:
    """Outcome of a lifecycle operation."""
    ok: bool
    report: Optional[Report] = None
    reason: Optional[RefusalReason] = None
    message: str = ""
    events: List[LifecycleEvent] = field(default_factory=list)
    duplicate_of: Optional[str] = None

    @classmethod
    def accepted(cls, report: Report, events: List[LifecycleEvent]) -> "LifecycleResult":
        return cls(ok=True, report=report, events=events)

    @classmethod
    def refused(
        cls,
        reason: RefusalReason,
        message: str,
        report: Optional[Report] = None,
        events: Optional[List[LifecycleEvent]] = None,
        duplicate_of: Optional[str] = None
    ) -> "LifecycleResult":
        return cls(
            ok=False,
            report=report,
            reason=reason,
            message=message,
            events=events or [],
            duplicate_of=duplicate_of,
        )

    def to_dict(self) -> Dict:
        return {
            "ok": self.ok,
            "report": self.report.to_dict() if self.report else None,
            "reason": self.reason.value if self.reason else None,
            "message": self.message,
            "events": [e.name for e in self.events],
            "duplicate_of": self.duplicate_of,
        }


class ReportLifecycle:
    """
    Enforces report transitions and their side effects.

    Counter changes (reputation, resolutions, rewards) are written here;
    messages to users are left to the notifier, which receives the events
    of every successful operation.
    """

    def __init__(
        self,
        repository: "CivicRepository",
        notifier: Optional["Notifier"] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utcnow
    ):
        """
        Initialize lifecycle engine.

        Args:
            repository: Store of reports and users
            notifier: Consumer of emitted events
            rng: Random source for reward selection
            clock: Time source for timestamps
        """
        self.repository = repository
        self.notifier = notifier
        self.rng = rng or random.Random()
        self.clock = clock

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    def find_duplicate(self, report_type: str, lat: float, lng: float) -> Optional[Report]:
        """Find an open report that a new submission would duplicate."""
        return find_open_duplicate(self.repository.get_reports(), report_type, lat, lng)

    def submit(
        self,
        data: NewReportInput,
        reporter: User,
        location: Location,
        weather: WeatherData
    ) -> LifecycleResult:
        """
        Create a pending report.

        Args:
            data: Form input
            reporter: Submitting user
            location: Report location with address
            weather: Current weather at the location

        Returns:
            Accepted result with the new report, or a duplicate refusal

        Raises:
            ReportValidationError: When the input is incomplete
        """
        valid = validate_new_report(data, location)

        with self.repository.transaction():
            existing = self.find_duplicate(valid.type, location.lat, location.lng)
            if existing is not None:
                return self.refuse_duplicate(existing, reporter)

            hazard = is_rainy_hazard(valid.type, weather)
            report = Report(
                id=self._new_id(),
                type=valid.type,
                title=valid.title,
                description=valid.description,
                location=location,
                status=ReportStatus.PENDING,
                priority=determine_priority(valid.type, hazard),
                image_url=valid.image_url,
                is_rainy_hazard=hazard,
                reported_by=reporter.name,
                reported_by_email=reporter.email,
                reported_at=self.clock(),
                tags=[valid.type.value],
            )
            self.repository.save_report(report)
            self.repository.update_user(reporter.email, _credit_submission)

        logger.info(
            f"New report created: {report.id} ({report.type.value}, "
            f"priority={report.priority.value}) at ({location.lat}, {location.lng})"
        )
        return self._finish(LifecycleResult.accepted(
            report, [ReportSubmitted(report, occurred_at=report.reported_at)]
        ))

    def refuse_duplicate(self, existing: Report, reporter: User) -> LifecycleResult:
        """
        Drop a submission that repeats an open report and tell the submitter.

        Args:
            existing: The open report already covering the issue
            reporter: User whose submission is dropped

        Returns:
            Refused result pointing at the existing report
        """
        logger.info(
            f"Duplicate {existing.type.value} report at "
            f"({existing.location.lat}, {existing.location.lng}) matches {existing.id}"
        )
        event = DuplicateSuppressed(
            existing,
            submitter_email=reporter.email,
            occurred_at=self.clock(),
        )
        return self._finish(LifecycleResult.refused(
            RefusalReason.DUPLICATE,
            "A similar issue has already been reported at this location.",
            report=existing,
            events=[event],
            duplicate_of=existing.id,
        ))

    # -------------------------------------------------------------------------
    # Triage
    # -------------------------------------------------------------------------

    def approve(self, report_id: str, actor: Optional[User]) -> LifecycleResult:
        """
        Accept a pending report and grant the reporter a random reward.

        Args:
            report_id: Report ID
            actor: Acting user, must be an authority

        Returns:
            LifecycleResult
        """
        with self.repository.transaction():
            report, refusal = self._check("approve", report_id, actor)
            if refusal:
                return refusal

            reward_type = RewardType(self.rng.choice(REWARD_TYPES))

            def apply(r: Report) -> None:
                r.status = ReportStatus.IN_PROGRESS
                r.reward = Reward(type=reward_type, claimed=False)

            report = self.repository.update_report(report_id, apply)
            self.repository.update_user(report.reported_by_email, _credit_reward)

        logger.info(f"Report {report_id} approved by {actor.name}, reward={reward_type.value}")
        event = ReportApproved(
            report, actor_name=actor.name, reward_type=reward_type, occurred_at=self.clock()
        )
        return self._finish(LifecycleResult.accepted(report, [event]))

    def reject(
        self,
        report_id: str,
        actor: Optional[User],
        reason: Optional[str] = None
    ) -> LifecycleResult:
        """
        Turn down a pending report.

        Args:
            report_id: Report ID
            actor: Acting user, must be an authority
            reason: Explanation shown to the reporter

        Returns:
            LifecycleResult
        """
        reason = (reason or "").strip() or None

        with self.repository.transaction():
            report, refusal = self._check("reject", report_id, actor)
            if refusal:
                return refusal

            now = self.clock()

            def apply(r: Report) -> None:
                r.status = ReportStatus.REJECTED
                r.rejected_at = now
                r.rejected_by = actor.name
                r.rejection_reason = reason or DEFAULT_REJECTION_REASON

            report = self.repository.update_report(report_id, apply)

        logger.info(f"Report {report_id} rejected by {actor.name}")
        event = ReportRejected(report, actor_name=actor.name, reason=reason, occurred_at=now)
        return self._finish(LifecycleResult.accepted(report, [event]))

    def resolve(self, report_id: str, actor: Optional[User]) -> LifecycleResult:
        """
        Mark an in-progress report as fixed and credit the authority.

        Args:
            report_id: Report ID
            actor: Acting user, must be an authority

        Returns:
            LifecycleResult
        """
        with self.repository.transaction():
            report, refusal = self._check("resolve", report_id, actor)
            if refusal:
                return refusal

            now = self.clock()

            def apply(r: Report) -> None:
                r.status = ReportStatus.RESOLVED
                r.resolved_at = now
                r.resolved_by = actor.name

            report = self.repository.update_report(report_id, apply)
            self.repository.update_user(actor.email, _credit_resolution)

        logger.info(f"Report {report_id} resolved by {actor.name}")
        event = ReportResolved(report, actor_name=actor.name, occurred_at=now)
        return self._finish(LifecycleResult.accepted(report, [event]))

    def record_view(self, report_id: str) -> Optional[Report]:
        """Count one view of a report."""

        def apply(r: Report) -> None:
            r.views += 1

        return self.repository.update_report(report_id, apply)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _check(self, action: str, report_id: str, actor: Optional[User]):
        """Return (report, None) when the action may proceed, else (None, refusal)."""
        source, target = TRANSITIONS[action]

        if actor is None or not actor.is_authority:
            logger.warning(f"Refused {action} on {report_id}: caller is not an authority")
            return None, LifecycleResult.refused(
                RefusalReason.NOT_AUTHORIZED,
                f"Only authority users can {action} reports",
            )

        report = self.repository.get_report(report_id)
        if report is None:
            return None, LifecycleResult.refused(
                RefusalReason.NOT_FOUND,
                f"Report {report_id} not found",
            )

        if report.status != source:
            logger.info(
                f"Refused {action} on {report_id}: status is {report.status.value}, "
                f"expected {source.value}"
            )
            return None, LifecycleResult.refused(
                RefusalReason.INVALID_TRANSITION,
                f"Cannot move report from {report.status.value} to {target.value}",
                report=report,
            )

        return report, None

    def _finish(self, result: LifecycleResult) -> LifecycleResult:
        if self.notifier is not None and result.events:
            self.notifier.dispatch(result.events)
        return result

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())[:12].upper()


def _credit_submission(user: User) -> None:
    user.reports_submitted += 1
    user.reputation += SUBMISSION_REPUTATION


def _credit_reward(user: User) -> None:
    user.rewards_earned += 1


def _credit_resolution(user: User) -> None:
    user.reports_resolved += 1
    user.reputation += RESOLUTION_REPUTATION
