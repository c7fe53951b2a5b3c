"""Time-anchored notifications: due detection, re-arming and default reminders."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, Sequence

from wastetrack.domain.entities import (
    DAILY_REMINDER_TAG,
    ActivityEntry,
    NotificationConditions,
    NotificationPayload,
    PayloadKind,
    Recurrence,
    ScheduledNotification,
)
from wastetrack.infrastructure.repositories import NotificationStore

from .streak import has_activity_on

logger = logging.getLogger(__name__)

MORNING_REMINDER_ID = "morning-reminder"
EVENING_REMINDER_ID = "evening-reminder"


def next_occurrence(scheduled_for: datetime, recurrence: Recurrence, now: datetime) -> datetime:
    """Return the first slot of ``recurrence`` strictly after ``now``.

    The slot keeps the wall-clock time of ``scheduled_for``. Missed periods are
    skipped in one step, so a long backlog never produces one fire per period.
    """

    period = recurrence.period
    if period is None:
        raise ValueError("One-shot notifications have no next occurrence")

    candidate = scheduled_for
    if now >= candidate:
        missed = (now - candidate) // period
        candidate = candidate + (missed + 1) * period
    while candidate <= now:
        candidate += period
    return candidate


def next_daily_slot(now: datetime, hour: int) -> datetime:
    """Return the next ``hour``:00 after ``now`` in ``now``'s timezone."""

    candidate = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def conditions_met(
    conditions: NotificationConditions,
    *,
    total_credits: float,
    activity_log: Sequence[ActivityEntry],
    today: date,
    tz: tzinfo | None = None,
) -> bool:
    """Return whether a due notification should be shown given current metrics."""

    if conditions.has_entry_today is not None:
        logged_today = has_activity_on(activity_log, today, tz=tz)
        if logged_today is not conditions.has_entry_today:
            return False
    if conditions.credit_threshold is not None and total_credits < conditions.credit_threshold:
        return False
    return True


def default_reminders(
    now: datetime, *, morning_hour: int = 9, evening_hour: int = 19
) -> list[ScheduledNotification]:
    """Return the canonical morning and evening reminders anchored after ``now``."""

    not_logged_today = NotificationConditions(has_entry_today=False)
    return [
        ScheduledNotification(
            id=MORNING_REMINDER_ID,
            title="Good morning! 🌱",
            body="Ready to track your waste and earn carbon credits today?",
            tag=DAILY_REMINDER_TAG,
            data=NotificationPayload(kind=PayloadKind.REMINDER, url="/diary"),
            requires_permission=True,
            scheduled_for=next_daily_slot(now, morning_hour),
            recurring=Recurrence.DAILY,
            conditions=not_logged_today,
        ),
        ScheduledNotification(
            id=EVENING_REMINDER_ID,
            title="Evening check-in 🌙",
            body="Don't forget to log today's waste for Thailand's 2050 goal!",
            tag=DAILY_REMINDER_TAG,
            data=NotificationPayload(kind=PayloadKind.REMINDER, url="/diary"),
            requires_permission=True,
            scheduled_for=next_daily_slot(now, evening_hour),
            recurring=Recurrence.DAILY,
            conditions=not_logged_today,
        ),
    ]


class Scheduler:
    """Own the scheduled notifications and keep the store in sync with them.

    The in-memory entries are authoritative; every change writes the full list
    back without reading the store first.
    """

    def __init__(
        self,
        store: NotificationStore,
        *,
        morning_hour: int = 9,
        evening_hour: int = 19,
    ) -> None:
        self._store = store
        self._morning_hour = morning_hour
        self._evening_hour = evening_hour
        self._entries: dict[str, ScheduledNotification] = {}
        self._lock = threading.RLock()

    def load(self) -> list[ScheduledNotification]:
        with self._lock:
            self._entries = {entry.id: entry for entry in self._store.load()}
        logger.info("Loaded %s scheduled notifications", len(self._entries))
        return self.entries()

    def entries(self) -> list[ScheduledNotification]:
        with self._lock:
            return sorted(self._entries.values(), key=lambda entry: entry.scheduled_for)

    def get(self, notification_id: str) -> ScheduledNotification | None:
        with self._lock:
            return self._entries.get(notification_id)

    def schedule(self, entry: ScheduledNotification) -> None:
        with self._lock:
            self._entries[entry.id] = entry
            self._persist()

    def cancel(self, notification_id: str) -> bool:
        with self._lock:
            if self._entries.pop(notification_id, None) is None:
                return False
            self._persist()
        return True

    def cancel_all(self) -> None:
        with self._lock:
            self._entries.clear()
            self._store.clear()

    def seed_defaults(self, now: datetime) -> list[ScheduledNotification]:
        """Add the default reminders whose ids are not scheduled yet."""

        with self._lock:
            added = [
                reminder
                for reminder in default_reminders(
                    now, morning_hour=self._morning_hour, evening_hour=self._evening_hour
                )
                if reminder.id not in self._entries
            ]
            if not added:
                return []
            for reminder in added:
                self._entries[reminder.id] = reminder
            self._persist()
        logger.info("Seeded default reminders: %s", ", ".join(entry.id for entry in added))
        return added

    def due(self, now: datetime) -> list[ScheduledNotification]:
        return [entry for entry in self.entries() if entry.scheduled_for <= now]

    def advance(self, entry: ScheduledNotification, now: datetime) -> ScheduledNotification:
        """Return ``entry`` moved to its next slot after ``now``."""

        return replace(
            entry, scheduled_for=next_occurrence(entry.scheduled_for, entry.recurring, now)
        )

    def complete(self, fired: Iterable[ScheduledNotification], now: datetime) -> None:
        """Re-arm fired recurring entries and drop fired one-shot entries.

        Entries rescheduled or cancelled while they were being delivered are
        left as they are now.
        """

        with self._lock:
            changed = False
            for entry in fired:
                if self._entries.get(entry.id) != entry:
                    continue
                if entry.is_recurring:
                    self._entries[entry.id] = self.advance(entry, now)
                else:
                    del self._entries[entry.id]
                changed = True
            if changed:
                self._persist()

    def _persist(self) -> None:
        self._store.save(self.entries())


__all__ = [
    "EVENING_REMINDER_ID",
    "MORNING_REMINDER_ID",
    "Scheduler",
    "conditions_met",
    "default_reminders",
    "next_daily_slot",
    "next_occurrence",
]
