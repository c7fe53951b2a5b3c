"""Builders for notifications announced directly by the client.

Achievements, streaks, level-ups and weekly reports are computed by the
client; the service only words them and routes them through delivery.
"""

from __future__ import annotations

from wastetrack.domain.entities import (
    ACHIEVEMENT_TAG,
    LEVEL_UP_TAG,
    STREAK_TAG,
    WEEKLY_REPORT_TAG,
    JSONScalar,
    NotificationConfig,
    NotificationPayload,
    PayloadKind,
)

WEEKLY_REPORT_ID = "weekly-report"


def _format_number(value: float) -> str:
    number = float(value)
    return str(int(number)) if number.is_integer() else str(number)


def achievement_notification(
    achievement_id: str,
    title: str,
    description: str,
    *,
    category: str = "general",
    credits: float | None = None,
    level: int | None = None,
    streak: int | None = None,
) -> NotificationConfig:
    details: dict[str, JSONScalar] = {"type": category}
    for key, value in (("credits", credits), ("level", level), ("streak", streak)):
        if value is not None:
            details[key] = value
    return NotificationConfig(
        id=achievement_id,
        title=title,
        body=description,
        tag=ACHIEVEMENT_TAG,
        data=NotificationPayload(kind=PayloadKind.ACHIEVEMENT, url="/diary", details=details),
    )


def streak_notification(streak: int, message: str | None = None) -> NotificationConfig:
    if streak < 1:
        raise ValueError("streak must be at least one day")
    return NotificationConfig(
        id=f"streak-{streak}",
        title=f"{streak}-Day Streak! 🔥",
        body=message or f"Amazing! You've tracked waste for {streak} days in a row!",
        tag=STREAK_TAG,
        data=NotificationPayload(
            kind=PayloadKind.STREAK, url="/diary", details={"streak": streak}
        ),
    )


def level_up_notification(level: int, level_name: str) -> NotificationConfig:
    return NotificationConfig(
        id=f"level-{level}",
        title="Level Up! 🎊",
        body=f"Congratulations! You've reached {level_name} (Level {level})!",
        tag=LEVEL_UP_TAG,
        data=NotificationPayload(
            kind=PayloadKind.LEVEL_UP,
            url="/diary",
            details={"level": level, "levelName": level_name},
        ),
    )


def weekly_report_notification(
    weekly_credits: float, trees_saved: float, co2_saved: float
) -> NotificationConfig:
    """Summarise the week's impact; one report replaces the previous one."""

    return NotificationConfig(
        id=WEEKLY_REPORT_ID,
        title="Weekly Impact Report 📊",
        body=(
            f"This week: {_format_number(weekly_credits)} credits earned, "
            f"{_format_number(trees_saved)} trees saved! 🌳"
        ),
        tag=WEEKLY_REPORT_TAG,
        data=NotificationPayload(
            kind=PayloadKind.WEEKLY_REPORT,
            url="/diary",
            details={
                "weeklyCredits": weekly_credits,
                "treesSaved": trees_saved,
                "co2Saved": co2_saved,
            },
        ),
    )


__all__ = [
    "WEEKLY_REPORT_ID",
    "achievement_notification",
    "level_up_notification",
    "streak_notification",
    "weekly_report_notification",
]
