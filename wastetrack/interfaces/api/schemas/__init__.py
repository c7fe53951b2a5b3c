from .notification import (
    AchievementNotificationRequest,
    DeliveryResult,
    EngagementResultRead,
    InboxNotificationRead,
    LevelUpNotificationRequest,
    NotificationConditionsSchema,
    NotificationConfigSchema,
    NotificationMarkReadRequest,
    NotificationPayloadSchema,
    NotificationPreferencesSchema,
    PermissionRequestResult,
    PermissionStateRead,
    ScheduledNotificationCreate,
    ScheduledNotificationRead,
    StreakNotificationRequest,
    TickResultRead,
    WeeklyReportNotificationRequest,
)

__all__ = [
    "AchievementNotificationRequest",
    "DeliveryResult",
    "EngagementResultRead",
    "InboxNotificationRead",
    "LevelUpNotificationRequest",
    "NotificationConditionsSchema",
    "NotificationConfigSchema",
    "NotificationMarkReadRequest",
    "NotificationPayloadSchema",
    "NotificationPreferencesSchema",
    "PermissionRequestResult",
    "PermissionStateRead",
    "ScheduledNotificationCreate",
    "ScheduledNotificationRead",
    "StreakNotificationRequest",
    "TickResultRead",
    "WeeklyReportNotificationRequest",
]
