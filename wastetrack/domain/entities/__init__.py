"""Domain entities exposed by the application."""

from .activity import ActivityEntry
from .inbox import InboxNotification
from .notification import (
    ACHIEVEMENT_TAG,
    DAILY_REMINDER_TAG,
    LEVEL_UP_TAG,
    STREAK_TAG,
    WEEKLY_REPORT_TAG,
    JSONScalar,
    NotificationConditions,
    NotificationConfig,
    NotificationPayload,
    PayloadKind,
    Recurrence,
    ScheduledNotification,
)
from .permission import PermissionState
from .preferences import NotificationPreferences, parse_clock

__all__ = [
    "ACHIEVEMENT_TAG",
    "ActivityEntry",
    "DAILY_REMINDER_TAG",
    "InboxNotification",
    "JSONScalar",
    "LEVEL_UP_TAG",
    "NotificationConditions",
    "NotificationConfig",
    "NotificationPayload",
    "NotificationPreferences",
    "PayloadKind",
    "PermissionState",
    "Recurrence",
    "ScheduledNotification",
    "STREAK_TAG",
    "WEEKLY_REPORT_TAG",
    "parse_clock",
]
