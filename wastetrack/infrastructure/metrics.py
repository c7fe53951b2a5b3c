"""Read-only access to the diary metrics the engagement rules depend on."""

from __future__ import annotations

import json
import logging
from typing import Protocol

from wastetrack.domain.entities import ActivityEntry
from wastetrack.infrastructure.storage import CREDITS_KEY, WASTE_ENTRIES_KEY, KeyValueStore
from wastetrack.utils import ensure_app_timezone, parse_iso_datetime

logger = logging.getLogger(__name__)


class MetricsProvider(Protocol):
    """Source of the current credit total and activity log."""

    def total_credits(self) -> float: ...

    def activity_log(self) -> list[ActivityEntry]: ...


class KeyValueMetricsProvider:
    """Read the values the diary writes under ``carbonCredits`` and ``wasteEntries``."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def total_credits(self) -> float:
        raw = self._store.get(CREDITS_KEY)
        if raw is None:
            return 0.0
        try:
            return float(raw)
        except ValueError:
            logger.warning("Stored credit total %r is not numeric; assuming 0", raw)
            return 0.0

    def activity_log(self) -> list[ActivityEntry]:
        raw = self._store.get(WASTE_ENTRIES_KEY)
        if raw is None:
            return []
        try:
            records = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Stored waste entries are not valid JSON; assuming none")
            return []
        if not isinstance(records, list):
            return []

        entries: list[ActivityEntry] = []
        for record in records:
            if not isinstance(record, dict) or not isinstance(record.get("timestamp"), str):
                continue
            try:
                timestamp = parse_iso_datetime(record["timestamp"])
            except ValueError:
                continue
            entries.append(ActivityEntry(timestamp=ensure_app_timezone(timestamp)))
        return entries


__all__ = ["KeyValueMetricsProvider", "MetricsProvider"]
