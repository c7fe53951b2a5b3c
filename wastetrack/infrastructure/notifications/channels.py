"""Delivery channels able to display a notification to the user."""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

from anyio import to_thread
from sqlalchemy.orm import Session

from wastetrack.domain.entities import InboxNotification
from wastetrack.infrastructure.repositories import NotificationInboxRepository

from .manager import ClientConnectionManager

logger = logging.getLogger(__name__)


class ChannelUnavailableError(RuntimeError):
    """Raised by a channel that could not reach anyone."""


class DeliveryChannel(Protocol):
    """Platform mechanism displaying ``title`` with the given ``options``."""

    name: str

    def is_available(self) -> bool: ...

    async def show(self, title: str, options: dict[str, Any]) -> None: ...


class WebSocketChannel:
    """Foreground channel: push straight to the clients that are open right now."""

    name = "foreground"

    def __init__(self, connections: ClientConnectionManager) -> None:
        self._connections = connections

    def is_available(self) -> bool:
        return self._connections.has_connections()

    async def show(self, title: str, options: dict[str, Any]) -> None:
        message = {"type": "notification", "data": {"title": title, **options}}
        delivered = await self._connections.broadcast(message)
        if not delivered:
            raise ChannelUnavailableError("No connected client received the notification")


class InboxChannel:
    """Background channel: keep the notification until the client reads it.

    The notification is stored first, so it is shown on the next client start
    even when nobody is connected, and then pushed to any open client. A newer
    notification with the same ``tag`` replaces the unread older one.
    """

    name = "background"

    def __init__(
        self,
        session_factory: Callable[[], Session],
        connections: ClientConnectionManager,
    ) -> None:
        self._session_factory = session_factory
        self._connections = connections

    def is_available(self) -> bool:
        return True

    async def show(self, title: str, options: dict[str, Any]) -> None:
        data = dict(options.get("data") or {})
        notification = InboxNotification(
            id=None,
            notification_id=str(data.get("notificationId") or ""),
            title=title,
            body=options.get("body", ""),
            tag=options.get("tag"),
            icon=options.get("icon"),
            badge=options.get("badge"),
            payload=data,
        )

        saved = await to_thread.run_sync(self._persist, notification)

        if self._connections.has_connections():
            await self._connections.broadcast(
                {"type": "notification", "data": serialize_inbox_notification(saved)}
            )

    def _persist(self, notification: InboxNotification) -> InboxNotification:
        session = self._session_factory()
        try:
            repository = NotificationInboxRepository(session)
            if notification.tag:
                repository.mark_tag_as_read(notification.tag)
            return repository.create(notification)
        finally:
            session.close()


def serialize_inbox_notification(notification: InboxNotification) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return {
        "id": notification.id,
        "notificationId": notification.notification_id,
        "title": notification.title,
        "body": notification.body,
        "tag": notification.tag,
        "icon": notification.icon,
        "badge": notification.badge,
        "data": notification.payload or {},
        "createdAt": notification.created_at.isoformat()
        if notification.created_at
        else None,
        "readAt": notification.read_at.isoformat() if notification.read_at else None,
    }


__all__ = [
    "ChannelUnavailableError",
    "DeliveryChannel",
    "InboxChannel",
    "WebSocketChannel",
    "serialize_inbox_notification",
]
