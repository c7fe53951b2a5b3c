"""SQLAlchemy model for notifications delivered through the inbox channel."""

from sqlalchemy import Column, DateTime, Integer, JSON, String, Text

from wastetrack.infrastructure.database import Base
from wastetrack.infrastructure.models.key_value import _now_naive


class NotificationInboxModel(Base):
    """Database representation for notifications awaiting the client."""

    __tablename__ = "notification_inbox"

    id = Column(Integer, primary_key=True, index=True)
    notification_id = Column(String(120), nullable=False, index=True)
    tag = Column(String(120), nullable=True)
    title = Column(String(200), nullable=False)
    body = Column(Text, nullable=False)
    icon = Column(String(255), nullable=True)
    badge = Column(String(255), nullable=True)
    payload = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(), nullable=False, default=_now_naive)
    read_at = Column(DateTime(), nullable=True)


__all__ = ["NotificationInboxModel"]
