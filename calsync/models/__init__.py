"""ORM models. Importing this package registers every table on Base.metadata."""

from calsync.models.calendar_connection import CalendarConnection
from calsync.models.external_event import ExternalEvent

__all__ = ["CalendarConnection", "ExternalEvent"]
