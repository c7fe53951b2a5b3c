"""Persistence for notification preferences and the daily delivery counter."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import date
from typing import Any

from wastetrack.domain.entities import NotificationPreferences
from wastetrack.infrastructure.storage import (
    DAILY_COUNT_KEY,
    LAST_RESET_KEY,
    PREFERENCES_KEY,
    KeyValueStore,
)

logger = logging.getLogger(__name__)

# Stored keys follow the client's record, which also carries settings this
# service does not use (sounds, challenge alerts, report day).
PREFERENCE_KEYS: dict[str, str] = {
    "daily_reminders": "dailyReminders",
    "achievement_notifications": "achievementNotifications",
    "streak_reminders": "streakReminders",
    "level_up_notifications": "levelUpNotifications",
    "weekly_reports": "weeklyReports",
    "quiet_hours_enabled": "quietHoursEnabled",
    "quiet_hours_start": "quietHoursStart",
    "quiet_hours_end": "quietHoursEnd",
    "max_notifications_per_day": "maxNotificationsPerDay",
}


class NotificationPreferencesRepository:
    """Merge stored preferences over the defaults."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def get(self) -> NotificationPreferences:
        stored = self._read_record()
        if stored is None:
            return NotificationPreferences()
        values = {
            field: stored[key] for field, key in PREFERENCE_KEYS.items() if key in stored
        }
        try:
            return NotificationPreferences(**values)
        except (TypeError, ValueError) as exc:
            logger.warning("Stored notification preferences are invalid (%s); using defaults", exc)
            return NotificationPreferences()

    def save(self, preferences: NotificationPreferences) -> None:
        record = self._read_record() or {}
        record.update(
            (PREFERENCE_KEYS[field], value) for field, value in asdict(preferences).items()
        )
        self._store.set(PREFERENCES_KEY, json.dumps(record))

    def _read_record(self) -> dict[str, Any] | None:
        raw = self._store.get(PREFERENCES_KEY)
        if raw is None:
            return None
        try:
            stored = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Stored notification preferences are not valid JSON; ignoring them")
            return None
        if not isinstance(stored, dict):
            logger.warning("Stored notification preferences are not an object; ignoring them")
            return None
        return stored


class DailyNotificationCounter:
    """Count delivered notifications per local calendar day."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def count_for(self, day: date) -> int:
        if self._store.get(LAST_RESET_KEY) != day.isoformat():
            return 0
        raw = self._store.get(DAILY_COUNT_KEY)
        try:
            return max(int(raw or 0), 0)
        except ValueError:
            return 0

    def increment(self, day: date) -> int:
        count = self.count_for(day) + 1
        self._store.set(LAST_RESET_KEY, day.isoformat())
        self._store.set(DAILY_COUNT_KEY, str(count))
        return count


__all__ = ["PREFERENCE_KEYS", "DailyNotificationCounter", "NotificationPreferencesRepository"]
