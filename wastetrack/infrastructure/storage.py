"""Durable key-value storage used by the notification engine."""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wastetrack.infrastructure.models import KeyValueEntryModel

logger = logging.getLogger(__name__)

SCHEDULED_NOTIFICATIONS_KEY = "scheduledNotifications"
FIRED_MILESTONES_KEY = "engagementFiredMilestones"
PREFERENCES_KEY = "notificationPreferences"
DAILY_COUNT_KEY = "dailyNotificationCount"
LAST_RESET_KEY = "lastNotificationReset"
PERMISSION_KEY = "notificationPermission"
CREDITS_KEY = "carbonCredits"
WASTE_ENTRIES_KEY = "wasteEntries"


class KeyValueStore(Protocol):
    """Minimal string store the engine persists its state into."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class SqlKeyValueStore:
    """Store string values in the ``key_value_entry`` table.

    Each call opens its own session so the store can be shared between request
    handlers and the periodic scheduler job. The store is best-effort: failed
    reads are reported as a missing key and failed writes are logged.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> str | None:
        session = self._session_factory()
        try:
            model = session.get(KeyValueEntryModel, key)
            return None if model is None else model.value
        except SQLAlchemyError:
            logger.exception("Failed to read key '%s' from the durable store", key)
            return None
        finally:
            session.close()

    def set(self, key: str, value: str) -> None:
        session = self._session_factory()
        try:
            model = session.get(KeyValueEntryModel, key)
            if model is None:
                model = KeyValueEntryModel(key=key, value=value)
                session.add(model)
            else:
                model.value = value
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Failed to write key '%s' to the durable store", key)
        finally:
            session.close()

    def remove(self, key: str) -> None:
        session = self._session_factory()
        try:
            model = session.get(KeyValueEntryModel, key)
            if model is None:
                return
            session.delete(model)
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Failed to remove key '%s' from the durable store", key)
        finally:
            session.close()


__all__ = [
    "CREDITS_KEY",
    "DAILY_COUNT_KEY",
    "FIRED_MILESTONES_KEY",
    "KeyValueStore",
    "LAST_RESET_KEY",
    "PERMISSION_KEY",
    "PREFERENCES_KEY",
    "SCHEDULED_NOTIFICATIONS_KEY",
    "SqlKeyValueStore",
    "WASTE_ENTRIES_KEY",
]
