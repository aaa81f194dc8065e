"""
RaastaFix - Notifier
Turns lifecycle events into inbox notifications for the affected citizen.
"""

import logging
import uuid
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple

from raastafix.core.constants import REWARD_PHRASES
from raastafix.crowdsource.duplicates import duplicate_message
from raastafix.crowdsource.events import (
    DuplicateSuppressed,
    LifecycleEvent,
    ReportApproved,
    ReportRejected,
    ReportResolved,
)
from raastafix.crowdsource.models import Notification, NotificationReward, NotificationType

if TYPE_CHECKING:
    from raastafix.database.repository import CivicRepository

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex[:16]


def build_notification(event: LifecycleEvent) -> Optional[Tuple[str, Notification]]:
    """
    Build the notification an event calls for.

    Args:
        event: Lifecycle event

    Returns:
        (recipient email, notification), or None if the event notifies nobody
    """
    report = event.report

    if isinstance(event, DuplicateSuppressed):
        return event.submitter_email, Notification(
            id=_new_id(),
            type=NotificationType.SYSTEM,
            message=duplicate_message(report),
            report_id=report.id,
            timestamp=event.occurred_at,
        )

    if not report.reported_by_email:
        return None

    if isinstance(event, ReportApproved):
        phrase = REWARD_PHRASES[event.reward_type.value]
        message = (
            f'Your report "{report.title}" has been approved by {event.actor_name}! '
            f"You've earned {phrase} as a reward. Check your rewards section."
        )
        return report.reported_by_email, Notification(
            id=_new_id(),
            type=NotificationType.APPROVAL,
            message=message,
            report_id=report.id,
            timestamp=event.occurred_at,
            reward=NotificationReward(type=event.reward_type),
        )

    if isinstance(event, ReportRejected):
        message = f'Your report "{report.title}" has been rejected by {event.actor_name}.'
        if event.reason:
            message += f" Reason: {event.reason}"
        return report.reported_by_email, Notification(
            id=_new_id(),
            type=NotificationType.REJECTION,
            message=message,
            report_id=report.id,
            timestamp=event.occurred_at,
        )

    if isinstance(event, ReportResolved):
        message = (
            f'Your report "{report.title}" has been resolved by {event.actor_name}. '
            f"Please check the app for details."
        )
        return report.reported_by_email, Notification(
            id=_new_id(),
            type=NotificationType.RESOLUTION,
            message=message,
            report_id=report.id,
            timestamp=event.occurred_at,
        )

    return None


class Notifier:
    """Delivers notifications to user inboxes in the repository."""

    def __init__(self, repository: "CivicRepository"):
        self.repository = repository
        self.history: List[Dict[str, str]] = []

    def dispatch(self, events: Iterable[LifecycleEvent]) -> List[Notification]:
        """
        Deliver the notifications for a batch of events.

        Recipients without an account still get the notification recorded
        in `history`; their inbox simply does not exist.

        Args:
            events: Events emitted by one lifecycle operation

        Returns:
            Notifications that were built
        """
        sent = []
        for event in events:
            built = build_notification(event)
            if built is None:
                continue

            email, notification = built
            delivered = self.repository.add_notification_to_user(email, notification)
            self.history.append({
                "event": event.name,
                "email": email,
                "notification_id": notification.id,
                "status": "delivered" if delivered else "no_recipient",
            })
            if delivered is None:
                logger.info(f"No account for {email}; {notification.type.value} notification dropped")
            else:
                logger.debug(f"{notification.type.value} notification delivered to {email}")
            sent.append(notification)
        return sent
