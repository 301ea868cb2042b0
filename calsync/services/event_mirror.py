"""
Event Mirror - the locally stored snapshot of a user's external events.

replace_all() deletes every row for (user, provider) and inserts the new
sequence inside one session transaction; a failure rolls back to the
previous snapshot instead of leaving a partial one. Rows are never merged
or updated individually, and duplicate event ids are stored as given.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from calsync.models.external_event import ExternalEvent


logger = logging.getLogger("calsync.services.event_mirror")


@dataclass(frozen=True)
class MirroredEvent:
    """A normalized provider event, ready to be stored."""
    event_id: str
    title: str
    start: str
    end: str
    color: str
    description: str = ""


class EventMirror:
    """Store adapter for ExternalEvent snapshots."""

    def __init__(self, db: Session):
        self.db = db

    def _delete_stmt(self, user_id: str, provider: str):
        return delete(ExternalEvent).where(
            ExternalEvent.user_id == user_id,
            ExternalEvent.provider == provider,
        )

    def replace_all(
        self,
        user_id: str,
        provider: str,
        events: Sequence[MirroredEvent],
    ) -> int:
        """
        Replace the snapshot for (user_id, provider) with events.

        Returns:
            Number of events inserted
        """
        try:
            removed = self.db.execute(self._delete_stmt(user_id, provider)).rowcount
            self.db.add_all(
                ExternalEvent(
                    user_id=user_id,
                    provider=provider,
                    event_id=event.event_id,
                    title=event.title,
                    start=event.start,
                    end=event.end,
                    color=event.color,
                    description=event.description,
                )
                for event in events
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        logger.info(
            f"Replaced {provider} snapshot for user {user_id}",
            extra={"removed": removed, "inserted": len(events)},
        )
        return len(events)

    def list_events(self, user_id: str, provider: str) -> List[ExternalEvent]:
        """Return the current snapshot ordered by start."""
        stmt = (
            select(ExternalEvent)
            .where(
                ExternalEvent.user_id == user_id,
                ExternalEvent.provider == provider,
            )
            .order_by(ExternalEvent.start, ExternalEvent.id)
        )
        return list(self.db.execute(stmt).scalars())

    def delete_all(self, user_id: str, provider: str) -> int:
        """Remove the snapshot for (user_id, provider). Returns rows removed."""
        try:
            removed = self.db.execute(self._delete_stmt(user_id, provider)).rowcount
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        logger.info(f"Deleted {removed} mirrored {provider} event(s) for user {user_id}")
        return removed
