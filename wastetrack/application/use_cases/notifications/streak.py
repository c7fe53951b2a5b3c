"""Consecutive-day activity streak."""

from __future__ import annotations

from datetime import date, timedelta, tzinfo
from typing import Iterable

from wastetrack.domain.entities import ActivityEntry
from wastetrack.utils import get_app_timezone, local_date, now_in_app_timezone

_ONE_DAY = timedelta(days=1)


def calculate_streak(
    entries: Iterable[ActivityEntry],
    *,
    today: date | None = None,
    tz: tzinfo | None = None,
) -> int:
    """Return how many consecutive days up to ``today`` contain an entry.

    Timestamps are reduced to calendar days in ``tz`` (the app timezone by
    default). The streak is 0 unless the most recent day is ``today``; from
    there it counts back one day at a time and stops at the first missing day.
    Days after ``today`` are ignored.
    """

    zone = tz or get_app_timezone()
    current = today or now_in_app_timezone().astimezone(zone).date()

    days = sorted(
        {day for day in (local_date(entry.timestamp, zone) for entry in entries) if day <= current},
        reverse=True,
    )
    if not days or days[0] != current:
        return 0

    streak = 1
    for previous, day in zip(days, days[1:]):
        if previous - day != _ONE_DAY:
            break
        streak += 1
    return streak


def has_activity_on(entries: Iterable[ActivityEntry], day: date, *, tz: tzinfo | None = None) -> bool:
    """Return whether any entry falls on ``day``."""

    zone = tz or get_app_timezone()
    return any(local_date(entry.timestamp, zone) == day for entry in entries)


__all__ = ["calculate_streak", "has_activity_on"]
