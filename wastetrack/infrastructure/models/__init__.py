"""ORM models used by the application infrastructure."""

from .key_value import KeyValueEntryModel
from .notification_inbox import NotificationInboxModel

__all__ = [
    "KeyValueEntryModel",
    "NotificationInboxModel",
]
