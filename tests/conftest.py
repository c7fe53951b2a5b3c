"""Shared fixtures for the notification engine tests."""

from __future__ import annotations

import os
import tempfile
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

# The database module builds its engine on import, so point it at a scratch file first.
_DB_DIR = Path(tempfile.mkdtemp(prefix="wastetrack-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'default.db'}"
os.environ["APP_TIMEZONE"] = "Asia/Bangkok"

BANGKOK = ZoneInfo("Asia/Bangkok")


class MemoryStore:
    """Dictionary-backed key-value store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def remove(self, key: str) -> None:
        self.values.pop(key, None)


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def bangkok_now() -> datetime:
    return datetime(2026, 10, 18, 10, 30, tzinfo=BANGKOK)
