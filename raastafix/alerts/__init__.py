"""
RaastaFix - Notifications
Delivers lifecycle notifications to citizen inboxes.
"""

from raastafix.alerts.notifier import Notifier, build_notification

__all__ = [
    "Notifier",
    "build_notification",
]
