"""Domain entity holding the user's notification preferences."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import time

_CLOCK_PATTERN = re.compile(r"^(?P<hour>[01]?\d|2[0-3]):(?P<minute>[0-5]\d)$")


def parse_clock(value: str) -> time:
    """Return the ``time`` described by an ``HH:MM`` string."""

    if not isinstance(value, str):
        raise TypeError(f"Clock value must be a string, got {type(value).__name__}")
    match = _CLOCK_PATTERN.match(value.strip())
    if match is None:
        msg = f"Invalid clock value '{value}', expected HH:MM"
        raise ValueError(msg)
    return time(int(match.group("hour")), int(match.group("minute")))


@dataclass(frozen=True)
class NotificationPreferences:
    """Switches and limits applied before a notification is delivered."""

    daily_reminders: bool = True
    achievement_notifications: bool = True
    streak_reminders: bool = True
    level_up_notifications: bool = True
    weekly_reports: bool = True
    quiet_hours_enabled: bool = False
    quiet_hours_start: str = "22:00"
    quiet_hours_end: str = "08:00"
    max_notifications_per_day: int = 5

    def __post_init__(self) -> None:
        for name in _SWITCHES:
            if not isinstance(getattr(self, name), bool):
                raise TypeError(f"{name} must be a boolean")
        if isinstance(self.max_notifications_per_day, bool) or not isinstance(
            self.max_notifications_per_day, int
        ):
            raise TypeError("max_notifications_per_day must be an integer")
        parse_clock(self.quiet_hours_start)
        parse_clock(self.quiet_hours_end)
        if self.max_notifications_per_day < 0:
            raise ValueError("max_notifications_per_day cannot be negative")


_SWITCHES = (
    "daily_reminders",
    "achievement_notifications",
    "streak_reminders",
    "level_up_notifications",
    "weekly_reports",
    "quiet_hours_enabled",
)


__all__ = ["NotificationPreferences", "parse_clock"]
