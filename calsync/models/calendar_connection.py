"""
Calendar Connection model - the stored OAuth credentials linking one user
to one external calendar provider.

Tokens are never stored in plaintext: access_token and refresh_token hold
TokenCipher output ("ivHex:ciphertextHex").

Example Usage:
    connection = CalendarConnection(
        user_id="user-123",
        provider="google",
        access_token=cipher.encrypt("ya29.xxx"),
        refresh_token=cipher.encrypt("1//xxx"),
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
    )
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from calsync.db.base import Base


class CalendarConnection(Base):
    """
    SQLAlchemy ORM model for the 'calendar_connections' table.

    (user_id, provider) is the primary key, so there is at most one
    connection per user and provider. Writes go through
    CredentialStore.upsert, which relies on that key for ON CONFLICT.
    """

    __tablename__ = "calendar_connections"

    # ---------------------------------------------------------------------------
    # IDENTITY
    # ---------------------------------------------------------------------------
    # user_id: opaque identifier supplied by the caller, not validated
    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)

    # provider: fixed tag for the calendar source ("google")
    provider: Mapped[str] = mapped_column(String(50), primary_key=True)

    # ---------------------------------------------------------------------------
    # ENCRYPTED TOKENS
    # ---------------------------------------------------------------------------
    access_token: Mapped[str] = mapped_column(Text, nullable=False)

    # May be None when the provider did not issue a refresh token
    refresh_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ---------------------------------------------------------------------------
    # TIMESTAMPS
    # ---------------------------------------------------------------------------
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ---------------------------------------------------------------------------
    # HELPER METHODS
    # ---------------------------------------------------------------------------
    def is_expired(self, buffer: timedelta = timedelta(minutes=5)) -> bool:
        """
        Check if the access token has expired.

        Returns:
            True if token is expired or about to expire (within buffer)
            True if expires_at is not set (assume expired)
        """
        if self.expires_at is None:
            return True

        expires_at = self.expires_at
        # SQLite hands back naive datetimes even for timezone=True columns
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)

        return datetime.now(timezone.utc) >= (expires_at - buffer)

    def __repr__(self) -> str:
        return f"<CalendarConnection(user_id={self.user_id!r}, provider='{self.provider}')>"
