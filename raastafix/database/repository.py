"""
Repository for reports, users and the current session user
Typed access to the three collections kept in the key-value store.
"""

import logging
from typing import Callable, List, Optional

from raastafix.core.constants import CURRENT_USER_KEY, REPORTS_KEY, USERS_KEY
from raastafix.crowdsource.models import Notification, Report, User
from .store import KeyValueStore

logger = logging.getLogger(__name__)

ReportMutator = Callable[[Report], None]
UserMutator = Callable[[User], None]


class CivicRepository:
    """
    Reads and writes domain records.

    Each mutating call is a locked read-modify-write of one collection.
    `transaction()` holds the lock across several calls.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def transaction(self):
        """Hold the store's writer lock for a multi-step operation."""
        return self.store.locked()

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def get_reports(self) -> List[Report]:
        """Load all reports, back-filling fields older blobs lack."""
        return [Report.model_validate(r) for r in self.store.get(REPORTS_KEY, [])]

    def get_report(self, report_id: str) -> Optional[Report]:
        for report in self.get_reports():
            if report.id == report_id:
                return report
        return None

    def save_report(self, report: Report) -> None:
        """Append a new report."""
        self.store.update(REPORTS_KEY, lambda reports: reports + [report.to_dict()], [])
        logger.debug(f"Report saved: {report.id}")

    def update_report(self, report_id: str, mutate: ReportMutator) -> Optional[Report]:
        """
        Apply an in-place change to one report.

        Args:
            report_id: Report ID
            mutate: Callback that modifies the loaded report

        Returns:
            The updated report, or None when the ID is unknown
        """
        with self.transaction():
            reports = self.get_reports()
            for report in reports:
                if report.id == report_id:
                    mutate(report)
                    self._write_reports(reports)
                    return report
        return None

    def delete_report(self, report_id: str) -> None:
        with self.transaction():
            reports = [r for r in self.get_reports() if r.id != report_id]
            self._write_reports(reports)

    def _write_reports(self, reports: List[Report]) -> None:
        self.store.put(REPORTS_KEY, [r.to_dict() for r in reports])

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def get_users(self) -> List[User]:
        return [User.model_validate(u) for u in self.store.get(USERS_KEY, [])]

    def get_user(self, email: str) -> Optional[User]:
        for user in self.get_users():
            if user.email == email:
                return user
        return None

    def save_user(self, user: User) -> None:
        """Insert a user, replacing any existing record with the same email."""
        with self.transaction():
            users = [u for u in self.get_users() if u.email != user.email]
            users.append(user)
            self._write_users(users)

    def update_user(self, email: str, mutate: UserMutator) -> Optional[User]:
        """
        Apply an in-place change to a user.

        The stored account and the current session user are separate
        records; both are changed when they match the email.

        Args:
            email: Target user's email
            mutate: Callback that modifies the loaded user

        Returns:
            The updated user (stored account first), or None if neither matched
        """
        updated: Optional[User] = None
        with self.transaction():
            users = self.get_users()
            for user in users:
                if user.email == email:
                    mutate(user)
                    self._write_users(users)
                    updated = user
                    break

            current = self.get_current_user()
            if current is not None and current.email == email:
                mutate(current)
                self.set_current_user(current)
                updated = updated or current

        return updated

    def add_notification_to_user(self, email: str, notification: Notification) -> Optional[User]:
        """Prepend a notification to a user's inbox."""
        return self.update_user(email, lambda user: user.notifications.insert(0, notification))

    def _write_users(self, users: List[User]) -> None:
        self.store.put(USERS_KEY, [u.to_dict() for u in users])

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def get_current_user(self) -> Optional[User]:
        data = self.store.get(CURRENT_USER_KEY)
        return User.model_validate(data) if data else None

    def set_current_user(self, user: Optional[User]) -> None:
        """Store the session user, or clear it when None."""
        if user is None:
            self.store.delete(CURRENT_USER_KEY)
        else:
            self.store.put(CURRENT_USER_KEY, user.to_dict())
