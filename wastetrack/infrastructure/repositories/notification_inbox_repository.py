"""Persistence helpers for inbox notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Iterable

from sqlalchemy.orm import Session

from wastetrack.domain.entities import InboxNotification
from wastetrack.infrastructure.models import NotificationInboxModel
from wastetrack.utils import ensure_app_timezone, now_in_app_timezone, to_storage_datetime


class NotificationInboxRepository:
    """Provide CRUD operations for :class:`InboxNotification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_recent(self, *, limit: int | None = 50) -> Sequence[InboxNotification]:
        query = self.session.query(NotificationInboxModel).order_by(
            NotificationInboxModel.created_at.desc(), NotificationInboxModel.id.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def list_unread(self, *, limit: int | None = 50) -> Sequence[InboxNotification]:
        query = (
            self.session.query(NotificationInboxModel)
            .filter(NotificationInboxModel.read_at.is_(None))
            .order_by(
                NotificationInboxModel.created_at.desc(), NotificationInboxModel.id.desc()
            )
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def create(self, notification: InboxNotification) -> InboxNotification:
        model = NotificationInboxModel()
        model.created_at = to_storage_datetime(
            notification.created_at or now_in_app_timezone()
        )
        model.notification_id = notification.notification_id
        model.tag = notification.tag
        model.title = notification.title
        model.body = notification.body
        model.icon = notification.icon
        model.badge = notification.badge
        model.payload = notification.payload or {}
        model.read_at = to_storage_datetime(notification.read_at)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def mark_as_read(self, notification_ids: Iterable[int]) -> int:
        ids = [notification_id for notification_id in notification_ids if notification_id is not None]
        if not ids:
            return 0
        updated = (
            self.session.query(NotificationInboxModel)
            .filter(
                NotificationInboxModel.id.in_(ids),
                NotificationInboxModel.read_at.is_(None),
            )
            .update(
                {
                    NotificationInboxModel.read_at: to_storage_datetime(
                        now_in_app_timezone()
                    )
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated

    def mark_tag_as_read(self, tag: str) -> int:
        updated = (
            self.session.query(NotificationInboxModel)
            .filter(
                NotificationInboxModel.tag == tag,
                NotificationInboxModel.read_at.is_(None),
            )
            .update(
                {
                    NotificationInboxModel.read_at: to_storage_datetime(
                        now_in_app_timezone()
                    )
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated

    @staticmethod
    def _to_entity(model: NotificationInboxModel) -> InboxNotification:
        return InboxNotification(
            id=model.id,
            notification_id=model.notification_id,
            title=model.title,
            body=model.body,
            tag=model.tag,
            icon=model.icon,
            badge=model.badge,
            payload=model.payload or {},
            created_at=ensure_app_timezone(model.created_at),
            read_at=ensure_app_timezone(model.read_at),
        )


__all__ = ["NotificationInboxRepository"]
