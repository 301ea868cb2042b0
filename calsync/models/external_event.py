"""
External Event model - one mirrored event from a user's external calendar.

The rows for a (user_id, provider) pair are a snapshot: each sync deletes
them all and inserts the provider's latest response. Nothing updates a
single row in place.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Integer, String, DateTime, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from calsync.db.base import Base


class ExternalEvent(Base):
    """
    SQLAlchemy ORM model for the 'external_events' table.

    start/end keep the provider's own representation: an RFC 3339
    date-time for timed events, or YYYY-MM-DD for all-day events.
    event_id is not unique; duplicates in a provider response are kept.
    """

    __tablename__ = "external_events"
    __table_args__ = (
        Index("ix_external_events_user_provider", "user_id", "provider"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    provider: Mapped[str] = mapped_column(String(50), nullable=False)

    # Provider-assigned identifier
    event_id: Mapped[str] = mapped_column(String(1024), nullable=False)

    title: Mapped[str] = mapped_column(Text, nullable=False)
    start: Mapped[str] = mapped_column(String(64), nullable=False)
    end: Mapped[str] = mapped_column(String(64), nullable=False)
    color: Mapped[str] = mapped_column(String(32), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    def is_all_day(self) -> bool:
        """All-day events carry a bare date (no time component)."""
        return "T" not in self.start

    def __repr__(self) -> str:
        return f"<ExternalEvent(user_id={self.user_id!r}, event_id={self.event_id!r})>"
