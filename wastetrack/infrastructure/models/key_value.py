"""SQLAlchemy model backing the durable key-value store."""

from sqlalchemy import Column, DateTime, String, Text

from wastetrack.infrastructure.database import Base
from wastetrack.utils import now_in_app_timezone, to_storage_datetime


def _now_naive():
    return to_storage_datetime(now_in_app_timezone())


class KeyValueEntryModel(Base):
    """Single string value stored under a well-known key."""

    __tablename__ = "key_value_entry"

    key = Column(String(120), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(), nullable=False, default=_now_naive, onupdate=_now_naive)


__all__ = ["KeyValueEntryModel"]
