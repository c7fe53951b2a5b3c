"""Domain entity describing a diary activity relevant to engagement."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ActivityEntry:
    """A logged diary entry, reduced to the moment it was recorded."""

    timestamp: datetime


__all__ = ["ActivityEntry"]
