"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Union

from pydantic import BaseModel, Field, field_validator

from wastetrack.domain.entities import (
    InboxNotification,
    NotificationConditions,
    NotificationConfig,
    NotificationPayload,
    NotificationPreferences,
    PayloadKind,
    PermissionState,
    Recurrence,
    ScheduledNotification,
    parse_clock,
)
from wastetrack.utils import ensure_app_timezone

DetailValue = Union[str, int, float, bool, None]


class NotificationPayloadSchema(BaseModel):
    """Typed data attached to a notification."""

    kind: PayloadKind = PayloadKind.CUSTOM
    url: str | None = None
    details: dict[str, DetailValue] = Field(default_factory=dict)

    def to_entity(self) -> NotificationPayload:
        return NotificationPayload(kind=self.kind, url=self.url, details=self.details)

    @classmethod
    def from_entity(cls, payload: NotificationPayload) -> "NotificationPayloadSchema":
        return cls(kind=payload.kind, url=payload.url, details=dict(payload.details))


class NotificationConfigSchema(BaseModel):
    """Notification to display immediately."""

    id: str = Field(..., min_length=1, max_length=120)
    title: str = Field(..., min_length=1, max_length=200)
    body: str = ""
    icon: str | None = None
    badge: str | None = None
    tag: str | None = Field(default=None, max_length=120)
    data: NotificationPayloadSchema = Field(default_factory=NotificationPayloadSchema)
    requires_permission: bool = True

    def to_entity(self) -> NotificationConfig:
        return NotificationConfig(
            id=self.id,
            title=self.title,
            body=self.body,
            icon=self.icon,
            badge=self.badge,
            tag=self.tag,
            data=self.data.to_entity(),
            requires_permission=self.requires_permission,
        )


class NotificationConditionsSchema(BaseModel):
    """Checks applied when a scheduled notification becomes due."""

    has_entry_today: bool | None = None
    credit_threshold: float | None = Field(default=None, ge=0)


class ScheduledNotificationCreate(NotificationConfigSchema):
    """Notification to deliver at ``scheduled_for``, optionally recurring."""

    scheduled_for: datetime
    recurring: Recurrence = Recurrence.NONE
    conditions: NotificationConditionsSchema = Field(
        default_factory=NotificationConditionsSchema
    )

    def to_entity(self) -> ScheduledNotification:
        return ScheduledNotification(
            id=self.id,
            title=self.title,
            body=self.body,
            icon=self.icon,
            badge=self.badge,
            tag=self.tag,
            data=self.data.to_entity(),
            requires_permission=self.requires_permission,
            scheduled_for=ensure_app_timezone(self.scheduled_for),
            recurring=self.recurring,
            conditions=NotificationConditions(
                has_entry_today=self.conditions.has_entry_today,
                credit_threshold=self.conditions.credit_threshold,
            ),
        )


class ScheduledNotificationRead(ScheduledNotificationCreate):
    """Representation of a scheduled notification returned to the client."""

    @classmethod
    def from_entity(cls, entry: ScheduledNotification) -> "ScheduledNotificationRead":
        return cls(
            id=entry.id,
            title=entry.title,
            body=entry.body,
            icon=entry.icon,
            badge=entry.badge,
            tag=entry.tag,
            data=NotificationPayloadSchema.from_entity(entry.data),
            requires_permission=entry.requires_permission,
            scheduled_for=entry.scheduled_for,
            recurring=entry.recurring,
            conditions=NotificationConditionsSchema(
                has_entry_today=entry.conditions.has_entry_today,
                credit_threshold=entry.conditions.credit_threshold,
            ),
        )


class PermissionStateRead(BaseModel):
    """Current notification permission state."""

    state: PermissionState


class PermissionRequestResult(BaseModel):
    """Outcome of a permission request."""

    granted: bool


class DeliveryResult(BaseModel):
    """Whether a notification reached a delivery channel."""

    delivered: bool


class EngagementResultRead(BaseModel):
    """Engagement notifications delivered by the last evaluation."""

    delivered: list[str] = Field(default_factory=list)


class TickResultRead(BaseModel):
    """Number of scheduled notifications shown by a manual evaluation pass."""

    shown: int


class AchievementNotificationRequest(BaseModel):
    """Achievement unlocked on the client."""

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = ""
    type: str = Field(default="general", description="milestone, streak, level, tree or general")
    credits: float | None = None
    level: int | None = None
    streak: int | None = None


class StreakNotificationRequest(BaseModel):
    """Current streak length and an optional custom message."""

    streak: int = Field(..., ge=1)
    message: str | None = None


class LevelUpNotificationRequest(BaseModel):
    """Level reached by the user."""

    level: int = Field(..., ge=1)
    level_name: str = Field(..., min_length=1)


class WeeklyReportNotificationRequest(BaseModel):
    """Totals for the week being reported."""

    weekly_credits: float = Field(..., ge=0)
    trees_saved: float = Field(..., ge=0)
    co2_saved: float = Field(default=0, ge=0)


class NotificationPreferencesSchema(BaseModel):
    """User switches and limits for notification delivery."""

    daily_reminders: bool = True
    achievement_notifications: bool = True
    streak_reminders: bool = True
    level_up_notifications: bool = True
    weekly_reports: bool = True
    quiet_hours_enabled: bool = False
    quiet_hours_start: str = "22:00"
    quiet_hours_end: str = "08:00"
    max_notifications_per_day: int = Field(default=5, ge=0, le=100)

    @field_validator("quiet_hours_start", "quiet_hours_end")
    @classmethod
    def _validate_clock(cls, value: str) -> str:
        parse_clock(value)
        return value.strip()

    def to_entity(self) -> NotificationPreferences:
        return NotificationPreferences(**self.model_dump())

    @classmethod
    def from_entity(cls, preferences: NotificationPreferences) -> "NotificationPreferencesSchema":
        return cls(
            daily_reminders=preferences.daily_reminders,
            achievement_notifications=preferences.achievement_notifications,
            streak_reminders=preferences.streak_reminders,
            level_up_notifications=preferences.level_up_notifications,
            weekly_reports=preferences.weekly_reports,
            quiet_hours_enabled=preferences.quiet_hours_enabled,
            quiet_hours_start=preferences.quiet_hours_start,
            quiet_hours_end=preferences.quiet_hours_end,
            max_notifications_per_day=preferences.max_notifications_per_day,
        )


class NotificationMarkReadRequest(BaseModel):
    """Payload used to mark a batch of inbox notifications as read."""

    ids: list[int] = Field(..., min_length=1, description="Inbox notification identifiers")

    def unique_ids(self) -> list[int]:
        """Return the list of identifiers without duplicates preserving order."""

        unique: list[int] = []
        seen: set[int] = set()
        for notification_id in self.ids:
            if notification_id in seen:
                continue
            seen.add(notification_id)
            unique.append(notification_id)
        return unique


class InboxNotificationRead(BaseModel):
    """Representation of an inbox notification delivered to the client."""

    id: int
    notification_id: str
    title: str
    body: str
    tag: str | None = None
    icon: str | None = None
    badge: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    read_at: datetime | None = None

    @classmethod
    def from_entity(cls, notification: InboxNotification) -> "InboxNotificationRead":
        return cls(
            id=notification.id or 0,
            notification_id=notification.notification_id,
            title=notification.title,
            body=notification.body,
            tag=notification.tag,
            icon=notification.icon,
            badge=notification.badge,
            payload=notification.payload or {},
            created_at=notification.created_at,
            read_at=notification.read_at,
        )


__all__ = [
    "DeliveryResult",
    "EngagementResultRead",
    "InboxNotificationRead",
    "NotificationConditionsSchema",
    "NotificationConfigSchema",
    "NotificationMarkReadRequest",
    "NotificationPayloadSchema",
    "NotificationPreferencesSchema",
    "PermissionRequestResult",
    "PermissionStateRead",
    "ScheduledNotificationCreate",
    "ScheduledNotificationRead",
    "TickResultRead",
]
