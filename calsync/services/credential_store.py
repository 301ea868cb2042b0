"""
Credential Store - persists one CalendarConnection per (user, provider).

Writes are a single INSERT ... ON CONFLICT DO UPDATE keyed on the
(user_id, provider) primary key, so repeating an upsert leaves exactly
one row holding the latest values. Store errors roll the session back
and propagate unchanged.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from calsync.models.calendar_connection import CalendarConnection


logger = logging.getLogger("calsync.services.credential_store")


_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class CredentialStore:
    """
    Store adapter for CalendarConnection rows.

    Tokens arrive already encrypted; this class never sees plaintext.
    """

    def __init__(self, db: Session):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        try:
            return _DIALECT_INSERTS[dialect]
        except KeyError:
            raise NotImplementedError(f"Upsert is not supported on dialect '{dialect}'")

    def upsert(
        self,
        user_id: str,
        provider: str,
        access_token: str,
        refresh_token: Optional[str],
        expires_at: Optional[datetime],
    ) -> CalendarConnection:
        """
        Create or replace the connection for (user_id, provider).

        Returns:
            The stored CalendarConnection
        """
        values = {
            "user_id": user_id,
            "provider": provider,
            "access_token": access_token,
            "refresh_token": refresh_token,
            "expires_at": expires_at,
            "updated_at": datetime.now(timezone.utc),
        }

        stmt = self._insert()(CalendarConnection).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "provider"],
            set_={
                "access_token": stmt.excluded.access_token,
                "refresh_token": stmt.excluded.refresh_token,
                "expires_at": stmt.excluded.expires_at,
                "updated_at": stmt.excluded.updated_at,
            },
        )

        try:
            self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        logger.info(
            f"Stored {provider} connection for user {user_id}",
            extra={"has_refresh_token": refresh_token is not None},
        )

        # The ORM identity map may still hold the pre-upsert row
        return self.get(user_id, provider, refresh=True)

    def get(
        self,
        user_id: str,
        provider: str,
        refresh: bool = False,
    ) -> Optional[CalendarConnection]:
        """Return the connection for (user_id, provider), or None."""
        stmt = select(CalendarConnection).where(
            CalendarConnection.user_id == user_id,
            CalendarConnection.provider == provider,
        )
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def delete(self, user_id: str, provider: str) -> int:
        """
        Delete the connection for (user_id, provider).

        Returns:
            Number of rows removed (0 when nothing was stored)
        """
        stmt = delete(CalendarConnection).where(
            CalendarConnection.user_id == user_id,
            CalendarConnection.provider == provider,
        )
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        logger.info(f"Deleted {result.rowcount} {provider} connection(s) for user {user_id}")
        return result.rowcount
