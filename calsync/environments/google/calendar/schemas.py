"""
Google Calendar Schemas - Data structures for calendar operations.

These Pydantic models represent the parts of the Google Calendar API
event resource that the mirror keeps.

Reference: https://developers.google.com/calendar/api/v3/reference/events
"""

from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field


class EventTime(BaseModel):
    """
    Event start or end time.

    Google Calendar API returns times in one of two formats:
    - dateTime: For timed events (e.g., "2024-01-15T10:00:00-05:00")
    - date: For all-day events (e.g., "2024-01-15")

    Both are kept as the provider's strings; nothing is re-serialized.
    """
    model_config = ConfigDict(populate_by_name=True)

    date_time: Optional[str] = Field(None, alias="dateTime")
    date: Optional[str] = Field(None)
    time_zone: Optional[str] = Field(None, alias="timeZone")

    def is_all_day(self) -> bool:
        """Check if this is an all-day event (date only, no time)."""
        return self.date is not None and self.date_time is None

    def value(self) -> Optional[str]:
        """The timestamped value if present, else the all-day date."""
        return self.date_time or self.date


class CalendarEvent(BaseModel):
    """
    A Google Calendar event as returned by events.list.

    Unknown fields in the API response are ignored.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Unique event identifier")
    summary: Optional[str] = Field(None, description="Event title")
    description: Optional[str] = Field(None, description="Event description")
    location: Optional[str] = Field(None, description="Event location")

    start: EventTime = Field(..., description="Event start time")
    end: EventTime = Field(..., description="Event end time")

    status: Optional[str] = Field(None, description="confirmed, tentative, cancelled")
    html_link: Optional[str] = Field(None, alias="htmlLink")

    def is_all_day(self) -> bool:
        return self.start.is_all_day()


class CalendarEventsResponse(BaseModel):
    """
    One page of an events.list response.

    Only the first page is read; the sync window is capped by maxResults.
    """
    model_config = ConfigDict(populate_by_name=True)

    items: List[CalendarEvent] = Field(default_factory=list)
    next_page_token: Optional[str] = Field(None, alias="nextPageToken")
    time_zone: Optional[str] = Field(None, alias="timeZone")
