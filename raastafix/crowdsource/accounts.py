"""
Citizen and authority accounts
Sign-up, sign-in and sign-out for the single local session.

Authority credentials (government ID and password) are required on
sign-up but never checked against anything.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from raastafix.crowdsource.models import User, UserRole

if TYPE_CHECKING:
    from raastafix.database.repository import CivicRepository

logger = logging.getLogger(__name__)


class AccountValidationError(ValueError):
    """Sign-up or sign-in input was incomplete or not allowed."""


@dataclass
class SignUpRequest:
    """Details entered in the sign-up form."""
    name: str
    email: str
    role: UserRole = UserRole.CITIZEN
    phone: str = ""
    gov_id: str = ""
    password: str = ""


class AccountService:
    """Manages users and the current session user."""

    def __init__(self, repository: "CivicRepository"):
        self.repository = repository

    def authenticate(self, request: SignUpRequest) -> User:
        """
        Sign in, creating the account on first use.

        An existing account keeps its counters and inbox. An email already
        registered under another role is refused.

        Args:
            request: Form details

        Returns:
            The session user

        Raises:
            AccountValidationError: On missing fields or a role mismatch
        """
        name = (request.name or "").strip()
        email = (request.email or "").strip()
        role = UserRole(request.role)

        if not name or not email:
            raise AccountValidationError("Please fill in all required fields.")

        if role == UserRole.AUTHORITY:
            if not (request.gov_id or "").strip() or not (request.password or "").strip():
                raise AccountValidationError("Government ID and password are required.")

        with self.repository.transaction():
            user = self.repository.get_user(email)
            if user is not None:
                if user.role != role:
                    raise AccountValidationError(
                        "Role switching is not allowed. Please sign out and sign in "
                        "with the appropriate account."
                    )
                logger.info(f"User signed in: {email} ({role.value})")
            else:
                user = User(
                    id=str(uuid.uuid4())[:12].upper(),
                    name=name,
                    email=email,
                    phone=(request.phone or "").strip() or None,
                    role=role,
                )
                if role == UserRole.AUTHORITY:
                    user.gov_id = request.gov_id.strip()
                    user.password = request.password.strip()
                self.repository.save_user(user)
                logger.info(f"New {role.value} account: {email}")

            self.repository.set_current_user(user)

        return user

    def current_user(self) -> Optional[User]:
        return self.repository.get_current_user()

    def sign_out(self) -> None:
        self.repository.set_current_user(None)
        logger.info("User signed out")

    def mark_notifications_read(self, email: str) -> Optional[User]:
        """Mark every notification in a user's inbox as read."""

        def apply(user: User) -> None:
            for notification in user.notifications:
                notification.read = True

        return self.repository.update_user(email, apply)
