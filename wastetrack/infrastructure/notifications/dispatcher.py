"""Deliver notifications through the best channel available."""

from __future__ import annotations

import logging
from typing import Any

from wastetrack.domain.entities import NotificationConfig
from wastetrack.infrastructure.repositories import serialize_payload

from .channels import DeliveryChannel
from .permission import PermissionGate

logger = logging.getLogger(__name__)


class Dispatcher:
    """Route a notification to the background channel, else the foreground one.

    ``dispatch`` never raises: refused permission, missing channels and channel
    failures all end with ``False`` and a log line.
    """

    def __init__(
        self,
        gate: PermissionGate,
        *,
        background: DeliveryChannel | None = None,
        foreground: DeliveryChannel | None = None,
        default_icon: str | None = None,
        default_badge: str | None = None,
    ) -> None:
        self._gate = gate
        self._background = background
        self._foreground = foreground
        self._default_icon = default_icon
        self._default_badge = default_badge

    async def dispatch(self, config: NotificationConfig) -> bool:
        if config.requires_permission and not self._gate.has_permission():
            if not await self._gate.request():
                logger.info("Permission not granted; skipping notification '%s'", config.id)
                return False

        options = self._build_options(config)

        if self._background is not None and self._background.is_available():
            try:
                await self._background.show(config.title, options)
            except Exception:
                logger.exception(
                    "Background channel failed for notification '%s'; falling back", config.id
                )
            else:
                logger.info("Notification '%s' shown via %s channel", config.id, self._background.name)
                return True

        if self._foreground is not None and self._foreground.is_available():
            options.pop("badge", None)
            try:
                await self._foreground.show(config.title, options)
            except Exception:
                logger.exception("Foreground channel failed for notification '%s'", config.id)
                return False
            logger.info("Notification '%s' shown via %s channel", config.id, self._foreground.name)
            return True

        logger.info("No delivery channel available for notification '%s'", config.id)
        return False

    def _build_options(self, config: NotificationConfig) -> dict[str, Any]:
        data = serialize_payload(config.data)
        data["notificationId"] = config.id
        options: dict[str, Any] = {
            "body": config.body,
            "icon": config.icon or self._default_icon,
            "badge": config.badge or self._default_badge,
            "data": data,
        }
        if config.tag:
            options["tag"] = config.tag
        return options


__all__ = ["Dispatcher"]
