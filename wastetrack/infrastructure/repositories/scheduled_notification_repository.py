"""Persistence helpers for scheduled notifications."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping

from wastetrack.domain.entities import (
    NotificationConditions,
    NotificationPayload,
    ScheduledNotification,
)
from wastetrack.infrastructure.storage import SCHEDULED_NOTIFICATIONS_KEY, KeyValueStore
from wastetrack.utils import ensure_app_timezone, parse_iso_datetime

logger = logging.getLogger(__name__)


class NotificationStore:
    """Keep the full list of scheduled notifications under a single key.

    Every write replaces the whole list. ``upsert`` and ``remove`` read, mutate
    and write back without any lock, and a failed read makes them start from an
    empty list; callers holding the full list should ``save`` it instead.
    """

    def __init__(self, store: KeyValueStore, *, key: str = SCHEDULED_NOTIFICATIONS_KEY) -> None:
        self._store = store
        self._key = key

    def load(self) -> list[ScheduledNotification]:
        raw = self._store.get(self._key)
        if raw is None:
            return []

        try:
            records = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Stored schedule under '%s' is not valid JSON; starting empty", self._key)
            return []

        if not isinstance(records, list):
            logger.warning("Stored schedule under '%s' is not a list; starting empty", self._key)
            return []

        entries: dict[str, ScheduledNotification] = {}
        for index, record in enumerate(records):
            try:
                entry = deserialize_scheduled_notification(record)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning(
                    "Skipping malformed scheduled notification at index %s: %s", index, exc
                )
                continue
            entries[entry.id] = entry
        return list(entries.values())

    def save(self, entries: Iterable[ScheduledNotification]) -> None:
        unique: dict[str, ScheduledNotification] = {}
        for entry in entries:
            unique[entry.id] = entry
        payload = [serialize_scheduled_notification(entry) for entry in unique.values()]
        self._store.set(self._key, json.dumps(payload))

    def upsert(self, entry: ScheduledNotification) -> None:
        entries = self.load()
        for index, existing in enumerate(entries):
            if existing.id == entry.id:
                entries[index] = entry
                break
        else:
            entries.append(entry)
        self.save(entries)

    def remove(self, notification_id: str) -> bool:
        entries = self.load()
        remaining = [entry for entry in entries if entry.id != notification_id]
        if len(remaining) == len(entries):
            return False
        self.save(remaining)
        return True

    def clear(self) -> None:
        self._store.remove(self._key)


def serialize_payload(payload: NotificationPayload) -> dict[str, Any]:
    """Return the JSON representation of ``payload``."""

    return {
        "kind": payload.kind.value,
        "url": payload.url,
        "details": dict(payload.details),
    }


def deserialize_payload(raw: Mapping[str, Any] | None) -> NotificationPayload:
    """Build a :class:`NotificationPayload` from its JSON representation."""

    if raw is None:
        return NotificationPayload()
    if not isinstance(raw, Mapping):
        raise TypeError("Notification data must be an object")
    details = raw.get("details") or {}
    if not isinstance(details, Mapping):
        raise TypeError("Notification data details must be an object")
    return NotificationPayload(
        kind=raw.get("kind") or "custom",
        url=raw.get("url"),
        details=details,
    )


def serialize_scheduled_notification(entry: ScheduledNotification) -> dict[str, Any]:
    """Return the stored record for ``entry``."""

    conditions: dict[str, Any] = {}
    if entry.conditions.has_entry_today is not None:
        conditions["hasEntryToday"] = entry.conditions.has_entry_today
    if entry.conditions.credit_threshold is not None:
        conditions["creditThreshold"] = entry.conditions.credit_threshold

    return {
        "id": entry.id,
        "title": entry.title,
        "body": entry.body,
        "icon": entry.icon,
        "badge": entry.badge,
        "tag": entry.tag,
        "data": serialize_payload(entry.data),
        "requiresPermission": entry.requires_permission,
        "scheduledFor": entry.scheduled_for.isoformat(),
        "recurring": entry.recurring.value,
        "conditions": conditions,
    }


def _required_str(record: Mapping[str, Any], field: str) -> str:
    value = record[field]
    if not isinstance(value, str):
        raise TypeError(f"{field} must be a string")
    return value


def _optional_str(record: Mapping[str, Any], field: str) -> str | None:
    value = record.get(field)
    if value is not None and not isinstance(value, str):
        raise TypeError(f"{field} must be a string")
    return value


def deserialize_scheduled_notification(record: Any) -> ScheduledNotification:
    """Build a :class:`ScheduledNotification` from a stored record.

    Raises ``KeyError``, ``TypeError`` or ``ValueError`` when the record cannot
    be interpreted.
    """

    if not isinstance(record, Mapping):
        raise TypeError("Scheduled notification record must be an object")

    scheduled_raw = record["scheduledFor"]
    if not isinstance(scheduled_raw, str):
        raise TypeError("scheduledFor must be a string")
    scheduled_for = ensure_app_timezone(parse_iso_datetime(scheduled_raw))

    conditions_raw = record.get("conditions") or {}
    if not isinstance(conditions_raw, Mapping):
        raise TypeError("conditions must be an object")
    has_entry_today = conditions_raw.get("hasEntryToday")
    credit_threshold = conditions_raw.get("creditThreshold")
    if has_entry_today is not None and not isinstance(has_entry_today, bool):
        raise TypeError("hasEntryToday must be a boolean")
    if credit_threshold is not None:
        credit_threshold = float(credit_threshold)

    requires_permission = record.get("requiresPermission", True)
    if not isinstance(requires_permission, bool):
        raise TypeError("requiresPermission must be a boolean")

    return ScheduledNotification(
        id=_required_str(record, "id"),
        title=_required_str(record, "title"),
        body=_required_str(record, "body"),
        icon=_optional_str(record, "icon"),
        badge=_optional_str(record, "badge"),
        tag=_optional_str(record, "tag"),
        data=deserialize_payload(record.get("data")),
        requires_permission=requires_permission,
        scheduled_for=scheduled_for,
        recurring=record.get("recurring") or "none",
        conditions=NotificationConditions(
            has_entry_today=has_entry_today,
            credit_threshold=credit_threshold,
        ),
    )


__all__ = [
    "NotificationStore",
    "deserialize_payload",
    "deserialize_scheduled_notification",
    "serialize_payload",
    "serialize_scheduled_notification",
]
