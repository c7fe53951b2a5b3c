"""Persistence for the set of engagement rules that already fired."""

from __future__ import annotations

import json
import logging
from typing import AbstractSet

from wastetrack.infrastructure.storage import FIRED_MILESTONES_KEY, KeyValueStore

logger = logging.getLogger(__name__)


class FiredMilestoneRepository:
    """Load and store the fired-milestone set as a sorted JSON list."""

    def __init__(self, store: KeyValueStore, *, key: str = FIRED_MILESTONES_KEY) -> None:
        self._store = store
        self._key = key

    def load(self) -> set[str]:
        raw = self._store.get(self._key)
        if raw is None:
            return set()
        try:
            values = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Fired milestone set under '%s' is corrupt; treating as empty", self._key)
            return set()
        if not isinstance(values, list):
            logger.warning("Fired milestone set under '%s' is not a list; treating as empty", self._key)
            return set()
        return {value for value in values if isinstance(value, str)}

    def save(self, fired: AbstractSet[str]) -> None:
        self._store.set(self._key, json.dumps(sorted(fired)))


__all__ = ["FiredMilestoneRepository"]
