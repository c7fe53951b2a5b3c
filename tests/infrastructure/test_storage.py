"""Tests for the SQL-backed stores, metrics and the inbox channel."""

import json

import pytest

from wastetrack.domain.entities import InboxNotification, PermissionState
from wastetrack.infrastructure import database
from wastetrack.infrastructure.metrics import KeyValueMetricsProvider
from wastetrack.infrastructure.notifications import InboxChannel
from wastetrack.infrastructure.repositories import (
    FiredMilestoneRepository,
    NotificationInboxRepository,
)
from wastetrack.infrastructure.storage import (
    CREDITS_KEY,
    FIRED_MILESTONES_KEY,
    PERMISSION_KEY,
    WASTE_ENTRIES_KEY,
    SqlKeyValueStore,
)


class RecordingConnections:
    def __init__(self, connected=False):
        self.connected = connected
        self.messages = []

    def has_connections(self):
        return self.connected

    async def broadcast(self, message):
        self.messages.append(message)
        return 1


@pytest.fixture
def session_factory(tmp_path):
    engine = database.build_engine(f"sqlite:///{tmp_path / 'store.db'}")
    database.initialize_database(engine)
    yield database.build_session_factory(engine)
    engine.dispose()


def test_sql_store_get_set_remove(session_factory):
    store = SqlKeyValueStore(session_factory)

    assert store.get(PERMISSION_KEY) is None

    store.set(PERMISSION_KEY, PermissionState.DEFAULT.value)
    store.set(PERMISSION_KEY, PermissionState.GRANTED.value)

    assert store.get(PERMISSION_KEY) == "granted"
    assert SqlKeyValueStore(session_factory).get(PERMISSION_KEY) == "granted"

    store.remove(PERMISSION_KEY)
    store.remove(PERMISSION_KEY)

    assert store.get(PERMISSION_KEY) is None


def test_fired_milestones_round_trip(memory_store):
    repository = FiredMilestoneRepository(memory_store)

    assert repository.load() == set()

    repository.save({"week-streak", "first-tree"})

    assert memory_store.get(FIRED_MILESTONES_KEY) == '["first-tree", "week-streak"]'
    assert repository.load() == {"first-tree", "week-streak"}


def test_corrupt_fired_milestones_load_empty(memory_store):
    memory_store.set(FIRED_MILESTONES_KEY, "first-tree")

    assert FiredMilestoneRepository(memory_store).load() == set()


def test_metrics_provider_reads_diary_keys(memory_store):
    memory_store.set(CREDITS_KEY, "512.5")
    memory_store.set(
        WASTE_ENTRIES_KEY,
        json.dumps(
            [
                {"id": "1", "timestamp": "2026-10-18T02:00:00.000Z", "category": "plastic"},
                {"id": "2", "timestamp": "not a date"},
                {"id": "3"},
                "garbage",
            ]
        ),
    )
    metrics = KeyValueMetricsProvider(memory_store)

    assert metrics.total_credits() == 512.5
    (entry,) = metrics.activity_log()
    assert entry.timestamp.hour == 9
    assert entry.timestamp.utcoffset().total_seconds() == 7 * 3600


def test_metrics_provider_defaults(memory_store):
    memory_store.set(CREDITS_KEY, "lots")
    memory_store.set(WASTE_ENTRIES_KEY, "{")
    metrics = KeyValueMetricsProvider(memory_store)

    assert metrics.total_credits() == 0.0
    assert metrics.activity_log() == []


@pytest.mark.asyncio
async def test_inbox_channel_replaces_unread_notification_with_same_tag(session_factory):
    connections = RecordingConnections(connected=True)
    channel = InboxChannel(session_factory, connections)
    options = {
        "body": "Log today's waste",
        "icon": "/icons/icon-192x192.png",
        "badge": "/icons/badge-72x72.png",
        "tag": "daily-reminder",
        "data": {"kind": "reminder", "notificationId": "morning-reminder"},
    }

    await channel.show("Good morning! 🌱", options)
    await channel.show("Evening check-in 🌙", {**options, "data": {"notificationId": "evening-reminder"}})

    session = session_factory()
    try:
        unread = NotificationInboxRepository(session).list_unread()
        recent = NotificationInboxRepository(session).list_recent()
    finally:
        session.close()

    assert [item.notification_id for item in unread] == ["evening-reminder"]
    assert len(recent) == 2
    assert [message["data"]["title"] for message in connections.messages] == [
        "Good morning! 🌱",
        "Evening check-in 🌙",
    ]
    assert connections.messages[0]["data"]["notificationId"] == "morning-reminder"


@pytest.mark.asyncio
async def test_inbox_channel_stores_without_connected_clients(session_factory):
    connections = RecordingConnections(connected=False)

    await InboxChannel(session_factory, connections).show("Title", {"body": "Body"})

    session = session_factory()
    try:
        (item,) = NotificationInboxRepository(session).list_unread()
    finally:
        session.close()
    assert item.title == "Title"
    assert item.tag is None
    assert connections.messages == []


def test_inbox_mark_as_read(session_factory):
    session = session_factory()
    try:
        repository = NotificationInboxRepository(session)
        first = repository.create(InboxNotification(id=None, notification_id="a", title="A", body=""))
        second = repository.create(InboxNotification(id=None, notification_id="b", title="B", body=""))

        assert repository.mark_as_read([first.id, first.id]) == 1
        assert repository.mark_as_read([first.id]) == 0
        assert [item.id for item in repository.list_unread()] == [second.id]
    finally:
        session.close()
