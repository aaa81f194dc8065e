"""
SQLAlchemy models for RaastaFix
A single key-value table holding JSON blobs.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoreEntry(Base):
    """
    One named collection serialized as JSON.

    The application keeps three entries: reports, users and the
    current-session user. No schema versioning; readers back-fill
    missing fields.
    """
    __tablename__ = "kv_store"

    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<StoreEntry({self.key}, {len(self.value or '')} bytes)>"
