"""User preferences applied before a notification is delivered."""

from __future__ import annotations

import logging
from datetime import datetime, time

from wastetrack.domain.entities import (
    ACHIEVEMENT_TAG,
    DAILY_REMINDER_TAG,
    LEVEL_UP_TAG,
    STREAK_TAG,
    WEEKLY_REPORT_TAG,
    NotificationConfig,
    NotificationPreferences,
    PayloadKind,
    parse_clock,
)
from wastetrack.infrastructure.repositories import (
    DailyNotificationCounter,
    NotificationPreferencesRepository,
)

logger = logging.getLogger(__name__)


def is_quiet_time(preferences: NotificationPreferences, moment: time) -> bool:
    """Return whether ``moment`` falls inside the quiet hours window.

    Both ends are inclusive; a start later than the end spans midnight.
    """

    if not preferences.quiet_hours_enabled:
        return False
    start = parse_clock(preferences.quiet_hours_start)
    end = parse_clock(preferences.quiet_hours_end)
    current = moment.replace(second=0, microsecond=0, tzinfo=None)
    if start > end:
        return current >= start or current <= end
    return start <= current <= end


def category_enabled(preferences: NotificationPreferences, config: NotificationConfig) -> bool:
    kind = config.data.kind
    tag = config.tag
    if tag == DAILY_REMINDER_TAG or kind is PayloadKind.REMINDER:
        return preferences.daily_reminders
    if tag == ACHIEVEMENT_TAG or kind in (PayloadKind.ACHIEVEMENT, PayloadKind.MILESTONE):
        return preferences.achievement_notifications
    if tag == STREAK_TAG or kind is PayloadKind.STREAK:
        return preferences.streak_reminders
    if tag == LEVEL_UP_TAG or kind is PayloadKind.LEVEL_UP:
        return preferences.level_up_notifications
    if tag == WEEKLY_REPORT_TAG or kind is PayloadKind.WEEKLY_REPORT:
        return preferences.weekly_reports
    return True


class DeliveryPolicy:
    """Gate deliveries on preferences, quiet hours and the daily cap."""

    def __init__(
        self,
        preferences: NotificationPreferencesRepository,
        counter: DailyNotificationCounter,
    ) -> None:
        self._preferences = preferences
        self._counter = counter

    def get_preferences(self) -> NotificationPreferences:
        return self._preferences.get()

    def update_preferences(self, preferences: NotificationPreferences) -> None:
        self._preferences.save(preferences)
        logger.info("Notification preferences updated")

    def allows(self, config: NotificationConfig, now: datetime) -> bool:
        preferences = self._preferences.get()

        if not category_enabled(preferences, config):
            logger.info("Notification '%s' disabled by preferences", config.id)
            return False

        if self._counter.count_for(now.date()) >= preferences.max_notifications_per_day:
            logger.info("Daily notification limit reached; skipping '%s'", config.id)
            return False

        if is_quiet_time(preferences, now.timetz()):
            logger.info("Skipping notification '%s' due to quiet hours", config.id)
            return False

        return True

    def record_delivery(self, now: datetime) -> int:
        return self._counter.increment(now.date())


__all__ = ["DeliveryPolicy", "category_enabled", "is_quiet_time"]
