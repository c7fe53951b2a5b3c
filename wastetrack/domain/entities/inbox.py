"""Domain entity representing a notification kept in the client inbox."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class InboxNotification:
    """Notification delivered while the client may not be in the foreground."""

    id: int | None
    notification_id: str
    title: str
    body: str
    tag: str | None = None
    icon: str | None = None
    badge: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    read_at: datetime | None = None


__all__ = ["InboxNotification"]
