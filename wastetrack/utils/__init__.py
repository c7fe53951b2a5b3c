"""Utility helpers for reusable functionality."""

from .datetime import (
    DEFAULT_TIMEZONE,
    ensure_app_timezone,
    get_app_timezone,
    local_date,
    now_in_app_timezone,
    parse_iso_datetime,
    resolve_timezone,
    to_storage_datetime,
)

__all__ = [
    "DEFAULT_TIMEZONE",
    "ensure_app_timezone",
    "get_app_timezone",
    "local_date",
    "now_in_app_timezone",
    "parse_iso_datetime",
    "resolve_timezone",
    "to_storage_datetime",
]
