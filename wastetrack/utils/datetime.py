"""Calendar and timezone helpers for the notification engine.

Reminder slots, streak days and the daily cap are all resolved in the single
zone named by ``APP_TIMEZONE``. SQLite drops offsets, so database columns hold
the naive wall-clock time in that zone.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from wastetrack.config import get_settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE: Final[str] = "Asia/Bangkok"


def resolve_timezone(name: str) -> tzinfo:
    """Return the IANA zone ``name``, or the default zone when it is unknown."""

    name = name.strip() or DEFAULT_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r; using %s", name, DEFAULT_TIMEZONE)
        return ZoneInfo(DEFAULT_TIMEZONE)


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    return resolve_timezone(get_settings().app_timezone)


def now_in_app_timezone() -> datetime:
    return datetime.now(tz=get_app_timezone())


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Express ``value`` in the app zone; naive values are taken as app wall-clock time."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=get_app_timezone())
    return value.astimezone(get_app_timezone())


def to_storage_datetime(value: datetime | None) -> datetime | None:
    """Return the naive app wall-clock time stored in ``DATETIME`` columns."""

    localized = ensure_app_timezone(value)
    return None if localized is None else localized.replace(tzinfo=None)


def local_date(value: datetime, tz: tzinfo | None = None) -> date:
    """Return the calendar day of ``value`` in ``tz`` (the app zone by default)."""

    target = tz or get_app_timezone()
    if value.tzinfo is None:
        return value.replace(tzinfo=target).date()
    return value.astimezone(target).date()


def parse_iso_datetime(raw: str) -> datetime:
    """Parse an ISO 8601 timestamp, accepting the ``Z`` suffix browsers emit."""

    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    return datetime.fromisoformat(text)
