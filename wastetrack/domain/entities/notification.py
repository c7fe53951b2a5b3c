"""Domain entities describing notifications and their schedule."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Mapping, Union

JSONScalar = Union[str, int, float, bool, None]

DAILY_REMINDER_TAG = "daily-reminder"
ACHIEVEMENT_TAG = "achievement"
STREAK_TAG = "streak"
LEVEL_UP_TAG = "level-up"
WEEKLY_REPORT_TAG = "weekly-report"


class PayloadKind(str, Enum):
    """Kinds of notification payloads understood by the client."""

    REMINDER = "reminder"
    MILESTONE = "milestone"
    STREAK = "streak"
    ACHIEVEMENT = "achievement"
    LEVEL_UP = "level-up"
    WEEKLY_REPORT = "weekly-report"
    CUSTOM = "custom"


class Recurrence(str, Enum):
    """Re-arm period of a scheduled notification."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"

    @property
    def period(self) -> timedelta | None:
        if self is Recurrence.DAILY:
            return timedelta(days=1)
        if self is Recurrence.WEEKLY:
            return timedelta(weeks=1)
        return None


@dataclass(frozen=True)
class NotificationPayload:
    """Serializable data attached to a notification, tagged by ``kind``."""

    kind: PayloadKind = PayloadKind.CUSTOM
    url: str | None = None
    details: Mapping[str, JSONScalar] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", PayloadKind(self.kind))
        for key, value in self.details.items():
            if not isinstance(key, str):
                raise ValueError("Payload detail keys must be strings")
            if value is not None and not isinstance(value, (str, int, float, bool)):
                msg = f"Payload detail '{key}' must be a JSON scalar"
                raise ValueError(msg)
        object.__setattr__(self, "details", dict(self.details))


@dataclass(frozen=True, kw_only=True)
class NotificationConfig:
    """Immutable description of a notification to display."""

    id: str
    title: str
    body: str
    icon: str | None = None
    badge: str | None = None
    tag: str | None = None
    data: NotificationPayload = field(default_factory=NotificationPayload)
    requires_permission: bool = True

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise ValueError("Notification id is required")
        if not self.title:
            raise ValueError("Notification title is required")


@dataclass(frozen=True)
class NotificationConditions:
    """Checks evaluated when a scheduled notification becomes due."""

    has_entry_today: bool | None = None
    credit_threshold: float | None = None

    def is_empty(self) -> bool:
        return self.has_entry_today is None and self.credit_threshold is None


@dataclass(frozen=True, kw_only=True)
class ScheduledNotification(NotificationConfig):
    """Notification anchored to a point in time, optionally recurring."""

    scheduled_for: datetime
    recurring: Recurrence = Recurrence.NONE
    conditions: NotificationConditions = field(default_factory=NotificationConditions)

    def __post_init__(self) -> None:
        super().__post_init__()
        object.__setattr__(self, "recurring", Recurrence(self.recurring))
        if self.scheduled_for.tzinfo is None:
            raise ValueError("scheduled_for must be timezone aware")

    @property
    def is_recurring(self) -> bool:
        return self.recurring is not Recurrence.NONE


__all__ = [
    "ACHIEVEMENT_TAG",
    "DAILY_REMINDER_TAG",
    "LEVEL_UP_TAG",
    "STREAK_TAG",
    "WEEKLY_REPORT_TAG",
    "JSONScalar",
    "NotificationConditions",
    "NotificationConfig",
    "NotificationPayload",
    "PayloadKind",
    "Recurrence",
    "ScheduledNotification",
]
