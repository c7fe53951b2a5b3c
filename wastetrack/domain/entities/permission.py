"""Domain values for notification delivery authorization."""

from __future__ import annotations

from enum import Enum


class PermissionState(str, Enum):
    """Authorization state reported by the host platform."""

    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


__all__ = ["PermissionState"]
