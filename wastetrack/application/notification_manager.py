"""Composition root tying scheduling, engagement and delivery together."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.orm import Session

from wastetrack.application.use_cases.notifications import (
    DeliveryPolicy,
    EngagementEvaluator,
    Scheduler,
    achievement_notification,
    conditions_met,
    default_rules,
    level_up_notification,
    streak_notification,
    weekly_report_notification,
)
from wastetrack.config import Settings
from wastetrack.domain.entities import (
    NotificationConfig,
    NotificationPreferences,
    ScheduledNotification,
)
from wastetrack.infrastructure.metrics import KeyValueMetricsProvider, MetricsProvider
from wastetrack.infrastructure.notifications import (
    ClientConnectionManager,
    ClientPermissionPlatform,
    Dispatcher,
    InboxChannel,
    PermissionGate,
    WebSocketChannel,
)
from wastetrack.infrastructure.repositories import (
    DailyNotificationCounter,
    FiredMilestoneRepository,
    NotificationPreferencesRepository,
    NotificationStore,
)
from wastetrack.infrastructure.storage import KeyValueStore, SqlKeyValueStore
from wastetrack.utils import get_app_timezone, local_date, now_in_app_timezone

logger = logging.getLogger(__name__)

TICK_JOB_ID = "notification_tick"


class NotificationManager:
    """Single entry point for the notification engine.

    Build one instance at application start and pass it to the code that
    needs it. ``init`` loads the schedule, seeds the default reminders, runs
    a first evaluation pass and starts the periodic tick; ``shutdown`` stops
    the tick.
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        dispatcher: Dispatcher,
        gate: PermissionGate,
        evaluator: EngagementEvaluator,
        fired_milestones: FiredMilestoneRepository,
        metrics: MetricsProvider,
        policy: DeliveryPolicy,
        check_interval_seconds: int = 60,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self._scheduler = scheduler
        self._dispatcher = dispatcher
        self._gate = gate
        self._evaluator = evaluator
        self._fired_milestones = fired_milestones
        self._metrics = metrics
        self._policy = policy
        self._check_interval_seconds = check_interval_seconds
        self._clock = clock
        self._tick_lock = asyncio.Lock()
        self._engagement_lock = asyncio.Lock()
        self._job_scheduler: AsyncIOScheduler | None = None
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def gate(self) -> PermissionGate:
        return self._gate

    async def init(self, *, start_ticking: bool = True) -> None:
        if self._initialized:
            return

        now = self._clock()
        self._scheduler.load()
        self._scheduler.seed_defaults(now)
        await self.tick()
        if start_ticking:
            self._start_ticking()
        self._initialized = True
        logger.info("Notification manager initialized")

    def shutdown(self) -> None:
        if self._job_scheduler is not None:
            if self._job_scheduler.running:
                self._job_scheduler.shutdown(wait=False)
            self._job_scheduler = None
        self._initialized = False
        logger.info("Notification manager stopped")

    async def request_permission(self) -> bool:
        return await self._gate.request()

    async def show_notification(
        self, config: NotificationConfig, *, now: datetime | None = None
    ) -> bool:
        """Deliver ``config`` if the policy allows it at ``now`` (the clock by default)."""

        moment = now or self._clock()
        if not self._policy.allows(config, moment):
            return False
        delivered = await self._dispatcher.dispatch(config)
        if delivered:
            self._policy.record_delivery(moment)
        return delivered

    async def show_achievement_notification(
        self,
        achievement_id: str,
        title: str,
        description: str,
        *,
        category: str = "general",
        credits: float | None = None,
        level: int | None = None,
        streak: int | None = None,
    ) -> bool:
        return await self.show_notification(
            achievement_notification(
                achievement_id,
                title,
                description,
                category=category,
                credits=credits,
                level=level,
                streak=streak,
            )
        )

    async def show_streak_notification(self, streak: int, message: str | None = None) -> bool:
        return await self.show_notification(streak_notification(streak, message))

    async def show_level_up_notification(self, level: int, level_name: str) -> bool:
        return await self.show_notification(level_up_notification(level, level_name))

    async def show_weekly_report_notification(
        self, weekly_credits: float, trees_saved: float, co2_saved: float
    ) -> bool:
        return await self.show_notification(
            weekly_report_notification(weekly_credits, trees_saved, co2_saved)
        )

    def schedule_notification(self, entry: ScheduledNotification) -> None:
        self._scheduler.schedule(entry)
        logger.info("Scheduled notification '%s' for %s", entry.id, entry.scheduled_for.isoformat())

    def cancel_notification(self, notification_id: str) -> bool:
        return self._scheduler.cancel(notification_id)

    def cancel_all_notifications(self) -> None:
        self._scheduler.cancel_all()
        logger.info("All scheduled notifications cancelled")

    def scheduled_notifications(self) -> list[ScheduledNotification]:
        return self._scheduler.entries()

    def get_preferences(self) -> NotificationPreferences:
        return self._policy.get_preferences()

    def update_preferences(self, preferences: NotificationPreferences) -> None:
        self._policy.update_preferences(preferences)

    async def schedule_engagement_notifications(self) -> list[NotificationConfig]:
        """Send milestone and streak notifications whose threshold was newly crossed.

        Only rules whose notification was actually delivered are remembered,
        so a rule blocked by permission or preferences fires on a later call.
        """

        async with self._engagement_lock:
            now = self._clock()
            fired = self._fired_milestones.load()
            result = self._evaluator.evaluate(
                self._metrics.total_credits(),
                self._metrics.activity_log(),
                fired,
                today=local_date(now),
            )

            delivered: list[NotificationConfig] = []
            for config in result.configs:
                if await self.show_notification(config, now=now):
                    delivered.append(config)

            if delivered:
                self._fired_milestones.save(fired | {config.id for config in delivered})
            return delivered

    async def tick(self, now: datetime | None = None) -> int:
        """Deliver the due notifications once; return how many were shown.

        A tick arriving while the previous pass is still running is skipped.
        """

        if self._tick_lock.locked():
            logger.info("Previous notification pass still running; skipping tick")
            return 0

        async with self._tick_lock:
            moment = now or self._clock()
            due = self._scheduler.due(moment)
            if not due:
                return 0

            credits: float | None = None
            activity = None
            shown = 0
            for entry in due:
                if not entry.conditions.is_empty():
                    if credits is None:
                        credits = self._metrics.total_credits()
                        activity = self._metrics.activity_log()
                    if not conditions_met(
                        entry.conditions,
                        total_credits=credits,
                        activity_log=activity,
                        today=local_date(moment),
                    ):
                        logger.info("Conditions not met for '%s'; not shown", entry.id)
                        continue
                if await self.show_notification(entry, now=moment):
                    shown += 1

            self._scheduler.complete(due, moment)
            return shown

    def _start_ticking(self) -> None:
        if self._job_scheduler is not None:
            return
        self._job_scheduler = AsyncIOScheduler(timezone=get_app_timezone())
        self._job_scheduler.add_job(
            self.tick,
            trigger="interval",
            seconds=self._check_interval_seconds,
            id=TICK_JOB_ID,
            replace_existing=True,
            max_instances=1,  # Prevent overlapping passes
            coalesce=True,  # Merge ticks missed while the loop was busy
        )
        self._job_scheduler.start()
        logger.info(
            "Notification checks scheduled every %s seconds", self._check_interval_seconds
        )


def build_notification_manager(
    settings: Settings,
    *,
    session_factory: Callable[[], Session],
    connections: ClientConnectionManager,
    store: KeyValueStore | None = None,
) -> tuple[NotificationManager, ClientPermissionPlatform]:
    """Assemble the default manager and the permission platform it prompts through."""

    store = store or SqlKeyValueStore(session_factory)
    platform = ClientPermissionPlatform(
        store,
        connections,
        prompt_timeout=settings.permission_prompt_timeout_seconds,
    )
    gate = PermissionGate(platform)
    dispatcher = Dispatcher(
        gate,
        background=InboxChannel(session_factory, connections)
        if settings.enable_inbox_channel
        else None,
        foreground=WebSocketChannel(connections),
        default_icon=settings.default_notification_icon,
        default_badge=settings.default_notification_badge,
    )
    manager = NotificationManager(
        scheduler=Scheduler(
            NotificationStore(store),
            morning_hour=settings.morning_reminder_hour,
            evening_hour=settings.evening_reminder_hour,
        ),
        dispatcher=dispatcher,
        gate=gate,
        evaluator=EngagementEvaluator(default_rules(settings.first_tree_credit_threshold)),
        fired_milestones=FiredMilestoneRepository(store),
        metrics=KeyValueMetricsProvider(store),
        policy=DeliveryPolicy(
            NotificationPreferencesRepository(store),
            DailyNotificationCounter(store),
        ),
        check_interval_seconds=settings.notification_check_interval_seconds,
    )
    return manager, platform


__all__ = ["NotificationManager", "TICK_JOB_ID", "build_notification_manager"]
