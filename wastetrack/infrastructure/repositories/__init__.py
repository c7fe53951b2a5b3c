"""Repository implementations for infrastructure layer."""

from .fired_milestone_repository import FiredMilestoneRepository
from .notification_inbox_repository import NotificationInboxRepository
from .preferences_repository import (
    DailyNotificationCounter,
    NotificationPreferencesRepository,
)
from .scheduled_notification_repository import (
    NotificationStore,
    deserialize_payload,
    deserialize_scheduled_notification,
    serialize_payload,
    serialize_scheduled_notification,
)

__all__ = [
    "DailyNotificationCounter",
    "FiredMilestoneRepository",
    "NotificationInboxRepository",
    "NotificationPreferencesRepository",
    "NotificationStore",
    "deserialize_payload",
    "deserialize_scheduled_notification",
    "serialize_payload",
    "serialize_scheduled_notification",
]
