"""Scheduling, engagement and delivery rules for notifications."""

from .announcements import (
    WEEKLY_REPORT_ID,
    achievement_notification,
    level_up_notification,
    streak_notification,
    weekly_report_notification,
)
from .engagement import (
    FIRST_TREE_CREDITS,
    EngagementEvaluator,
    EngagementMetrics,
    EngagementResult,
    EngagementRule,
    credit_milestone,
    default_rules,
    streak_milestone,
)
from .policy import DeliveryPolicy, category_enabled, is_quiet_time
from .scheduler import (
    EVENING_REMINDER_ID,
    MORNING_REMINDER_ID,
    Scheduler,
    conditions_met,
    default_reminders,
    next_daily_slot,
    next_occurrence,
)
from .streak import calculate_streak, has_activity_on

__all__ = [
    "DeliveryPolicy",
    "EVENING_REMINDER_ID",
    "EngagementEvaluator",
    "EngagementMetrics",
    "EngagementResult",
    "EngagementRule",
    "FIRST_TREE_CREDITS",
    "MORNING_REMINDER_ID",
    "Scheduler",
    "WEEKLY_REPORT_ID",
    "achievement_notification",
    "calculate_streak",
    "category_enabled",
    "conditions_met",
    "credit_milestone",
    "default_reminders",
    "default_rules",
    "has_activity_on",
    "is_quiet_time",
    "level_up_notification",
    "next_daily_slot",
    "next_occurrence",
    "streak_milestone",
    "streak_notification",
    "weekly_report_notification",
]
