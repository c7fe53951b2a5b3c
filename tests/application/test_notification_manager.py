"""Tests for the notification manager lifecycle, ticks and engagement flow."""

import asyncio
import json
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from wastetrack.application.notification_manager import NotificationManager
from wastetrack.application.use_cases.notifications import (
    EVENING_REMINDER_ID,
    MORNING_REMINDER_ID,
    DeliveryPolicy,
    EngagementEvaluator,
    Scheduler,
)
from wastetrack.domain.entities import (
    NotificationConditions,
    NotificationConfig,
    NotificationPreferences,
    PermissionState,
    Recurrence,
    ScheduledNotification,
)
from wastetrack.infrastructure.metrics import KeyValueMetricsProvider
from wastetrack.infrastructure.notifications import Dispatcher, PermissionGate
from wastetrack.infrastructure.repositories import (
    DailyNotificationCounter,
    FiredMilestoneRepository,
    NotificationPreferencesRepository,
    NotificationStore,
)
from wastetrack.infrastructure.storage import (
    CREDITS_KEY,
    FIRED_MILESTONES_KEY,
    WASTE_ENTRIES_KEY,
)

BANGKOK = ZoneInfo("Asia/Bangkok")
NOW = datetime(2026, 10, 18, 10, 30, tzinfo=BANGKOK)


class SwitchablePlatform:
    def __init__(self, state=PermissionState.GRANTED):
        self.state = state
        self.prompts = 0

    def current_state(self):
        return self.state

    async def request(self):
        self.prompts += 1
        return self.state


class RecordingChannel:
    name = "foreground"

    def __init__(self):
        self.shown = []

    def is_available(self):
        return True

    async def show(self, title, options):
        self.shown.append((title, options))


class BlockingChannel(RecordingChannel):
    """Holds every delivery until ``release`` is set."""

    def __init__(self):
        super().__init__()
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def show(self, title, options):
        await super().show(title, options)
        self.entered.set()
        await self.release.wait()


class Harness:
    def __init__(self, store, state=PermissionState.GRANTED, channel=None):
        self.store = store
        self.platform = SwitchablePlatform(state)
        self.channel = channel or RecordingChannel()
        gate = PermissionGate(self.platform)
        self.manager = NotificationManager(
            scheduler=Scheduler(NotificationStore(store)),
            dispatcher=Dispatcher(gate, foreground=self.channel),
            gate=gate,
            evaluator=EngagementEvaluator(),
            fired_milestones=FiredMilestoneRepository(store),
            metrics=KeyValueMetricsProvider(store),
            policy=DeliveryPolicy(
                NotificationPreferencesRepository(store),
                DailyNotificationCounter(store),
            ),
            clock=lambda: NOW,
        )

    def shown_titles(self):
        return [title for title, _ in self.channel.shown]


@pytest.fixture
def harness(memory_store):
    return Harness(memory_store)


def _one_shot(notification_id="custom", *, at=NOW - timedelta(minutes=5), **kwargs):
    return ScheduledNotification(
        id=notification_id,
        title=f"Scheduled {notification_id}",
        body="Body",
        scheduled_for=at,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_init_seeds_default_reminders_once(harness):
    await harness.manager.init(start_ticking=False)
    await harness.manager.init(start_ticking=False)

    assert harness.manager.initialized
    assert [entry.id for entry in harness.manager.scheduled_notifications()] == [
        EVENING_REMINDER_ID,
        MORNING_REMINDER_ID,
    ]
    assert harness.channel.shown == []


@pytest.mark.asyncio
async def test_init_recovers_from_corrupt_schedule(memory_store):
    memory_store.set("scheduledNotifications", "not json")
    harness = Harness(memory_store)

    await harness.manager.init(start_ticking=False)

    assert len(harness.manager.scheduled_notifications()) == 2


@pytest.mark.asyncio
async def test_init_fires_backlog_once_and_starts_ticking(harness):
    harness.manager.schedule_notification(
        _one_shot(
            "daily",
            at=datetime(2026, 10, 13, 9, 0, tzinfo=BANGKOK),
            recurring=Recurrence.DAILY,
        )
    )

    await harness.manager.init()
    try:
        assert harness.shown_titles() == ["Scheduled daily"]
        assert await harness.manager.tick() == 0
    finally:
        harness.manager.shutdown()

    assert not harness.manager.initialized


@pytest.mark.asyncio
async def test_tick_removes_one_shot_after_showing(harness):
    harness.manager.schedule_notification(_one_shot())

    assert await harness.manager.tick() == 1
    assert harness.manager.scheduled_notifications() == []
    assert NotificationStore(harness.store).load() == []


@pytest.mark.asyncio
async def test_tick_suppresses_reminder_when_user_already_logged(harness):
    harness.store.set(WASTE_ENTRIES_KEY, json.dumps([{"timestamp": "2026-10-18T01:00:00Z"}]))
    harness.manager.schedule_notification(
        _one_shot(
            "daily",
            recurring=Recurrence.DAILY,
            conditions=NotificationConditions(has_entry_today=False),
        )
    )

    assert await harness.manager.tick() == 0
    assert harness.channel.shown == []
    (entry,) = harness.manager.scheduled_notifications()
    assert entry.scheduled_for > NOW


@pytest.mark.asyncio
async def test_tick_respects_credit_threshold(harness):
    harness.store.set(CREDITS_KEY, "120")
    harness.manager.schedule_notification(
        _one_shot("low", conditions=NotificationConditions(credit_threshold=100))
    )
    harness.manager.schedule_notification(
        _one_shot("high", conditions=NotificationConditions(credit_threshold=1000))
    )

    assert await harness.manager.tick() == 1
    assert harness.shown_titles() == ["Scheduled low"]


@pytest.mark.asyncio
async def test_engagement_fires_first_tree_once(harness):
    harness.store.set(CREDITS_KEY, "520")

    first = await harness.manager.schedule_engagement_notifications()
    harness.store.set(CREDITS_KEY, "600")
    second = await harness.manager.schedule_engagement_notifications()

    assert [config.id for config in first] == ["first-tree"]
    assert second == []
    assert json.loads(harness.store.get(FIRED_MILESTONES_KEY)) == ["first-tree"]
    assert harness.shown_titles() == ["Congratulations! You saved your first tree 🌳"]


@pytest.mark.asyncio
async def test_engagement_retries_after_refused_permission(memory_store):
    harness = Harness(memory_store, state=PermissionState.DEFAULT)
    memory_store.set(CREDITS_KEY, "520")

    assert await harness.manager.schedule_engagement_notifications() == []
    assert memory_store.get(FIRED_MILESTONES_KEY) is None

    harness.platform.state = PermissionState.GRANTED
    delivered = await harness.manager.schedule_engagement_notifications()

    assert [config.id for config in delivered] == ["first-tree"]


@pytest.mark.asyncio
async def test_denied_permission_never_prompts(memory_store):
    harness = Harness(memory_store, state=PermissionState.DENIED)

    assert await harness.manager.request_permission() is False
    assert await harness.manager.show_notification(
        NotificationConfig(id="x", title="Hello", body="")
    ) is False
    assert harness.platform.prompts == 0


@pytest.mark.asyncio
async def test_show_notification_applies_daily_cap(harness):
    harness.manager.update_preferences(NotificationPreferences(max_notifications_per_day=1))
    config = NotificationConfig(id="note", title="Hello", body="World")

    assert await harness.manager.show_notification(config) is True
    assert await harness.manager.show_notification(config) is False
    assert len(harness.channel.shown) == 1


@pytest.mark.asyncio
async def test_cancel_operations(harness):
    await harness.manager.init(start_ticking=False)
    harness.manager.schedule_notification(_one_shot(at=NOW + timedelta(days=1)))

    assert harness.manager.cancel_notification("custom") is True
    assert harness.manager.cancel_notification("custom") is False

    harness.manager.cancel_all_notifications()

    assert harness.manager.scheduled_notifications() == []


@pytest.mark.asyncio
async def test_tick_during_running_pass_is_skipped(memory_store):
    channel = BlockingChannel()
    harness = Harness(memory_store, channel=channel)
    harness.manager.schedule_notification(_one_shot("slow"))

    first = asyncio.create_task(harness.manager.tick())
    await channel.entered.wait()

    assert await harness.manager.tick() == 0
    assert len(channel.shown) == 1

    channel.release.set()

    assert await first == 1
    assert len(channel.shown) == 1
    assert harness.manager.scheduled_notifications() == []


@pytest.mark.asyncio
async def test_tick_applies_quiet_hours_at_the_pass_time(harness):
    harness.manager.update_preferences(NotificationPreferences(quiet_hours_enabled=True))
    late = datetime(2026, 10, 18, 23, 0, tzinfo=BANGKOK)
    harness.manager.schedule_notification(_one_shot("late", at=late - timedelta(minutes=5)))

    assert await harness.manager.tick(now=late) == 0
    assert harness.channel.shown == []


@pytest.mark.asyncio
async def test_tick_counts_deliveries_on_the_pass_day(harness):
    next_day = NOW + timedelta(days=1)
    harness.manager.schedule_notification(_one_shot("tomorrow", at=next_day))

    assert await harness.manager.tick(now=next_day) == 1
    assert DailyNotificationCounter(harness.store).count_for(next_day.date()) == 1
    assert DailyNotificationCounter(harness.store).count_for(NOW.date()) == 0


@pytest.mark.asyncio
async def test_level_up_and_weekly_report_wording(harness):
    assert await harness.manager.show_level_up_notification(4, "Eco Champion") is True
    assert await harness.manager.show_weekly_report_notification(120, 2.5, 18.4) is True

    (level_title, level_options), (report_title, report_options) = harness.channel.shown
    assert level_title == "Level Up! 🎊"
    assert level_options["body"] == "Congratulations! You've reached Eco Champion (Level 4)!"
    assert level_options["tag"] == "level-up"
    assert level_options["data"]["notificationId"] == "level-4"
    assert report_title == "Weekly Impact Report 📊"
    assert report_options["body"] == "This week: 120 credits earned, 2.5 trees saved! 🌳"
    assert report_options["data"]["details"]["co2Saved"] == 18.4


@pytest.mark.asyncio
async def test_streak_and_achievement_announcements(harness):
    assert await harness.manager.show_streak_notification(5) is True
    assert await harness.manager.show_achievement_notification(
        "recycler", "Recycling Pro ♻️", "Sorted 50 items", category="milestone", credits=250
    ) is True

    (streak_title, streak_options), (_, achievement_options) = harness.channel.shown
    assert streak_title == "5-Day Streak! 🔥"
    assert streak_options["body"] == "Amazing! You've tracked waste for 5 days in a row!"
    assert achievement_options["tag"] == "achievement"
    assert achievement_options["data"]["kind"] == "achievement"
    assert achievement_options["data"]["details"] == {"type": "milestone", "credits": 250}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("field", "announce"),
    [
        ("level_up_notifications", lambda manager: manager.show_level_up_notification(2, "Sprout")),
        ("weekly_reports", lambda manager: manager.show_weekly_report_notification(10, 0, 0)),
        ("streak_reminders", lambda manager: manager.show_streak_notification(3)),
        (
            "achievement_notifications",
            lambda manager: manager.show_achievement_notification("a", "Title", "Body"),
        ),
    ],
)
async def test_announcements_respect_their_preference_switch(harness, field, announce):
    harness.manager.update_preferences(NotificationPreferences(**{field: False}))

    assert await announce(harness.manager) is False
    assert harness.channel.shown == []
