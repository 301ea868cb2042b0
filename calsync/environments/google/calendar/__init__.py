"""
Google Calendar Module - Calendar API Integration

Lists upcoming events from a user's primary calendar for mirroring.
"""

from calsync.environments.google.calendar.client import GoogleCalendarClient
from calsync.environments.google.calendar.schemas import (
    CalendarEvent,
    CalendarEventsResponse,
    EventTime,
)

__all__ = [
    "GoogleCalendarClient",
    "CalendarEvent",
    "CalendarEventsResponse",
    "EventTime",
]
