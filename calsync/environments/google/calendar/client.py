"""
Google Calendar API Client - Fetch upcoming calendar events.

API Reference:
==============
- Events API: https://developers.google.com/calendar/api/v3/reference/events

Usage Example:
==============
    client = GoogleCalendarClient(access_token="ya29.xxx")
    events = await client.list_upcoming_events(max_results=50)
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

import httpx
from pydantic import ValidationError

from calsync.environments.base import APIError
from calsync.environments.google.calendar.schemas import (
    CalendarEvent,
    CalendarEventsResponse,
)


logger = logging.getLogger("calsync.environments.google.calendar")


class GoogleCalendarClient:
    """
    Google Calendar API client.

    Bound to a single access token with calendar.readonly scope; the sync
    engine builds one per sync.

    Attributes:
        access_token: Google OAuth access token with calendar scope
    """

    BASE_URL = "https://www.googleapis.com/calendar/v3"

    def __init__(
        self,
        access_token: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize the Calendar client.

        Args:
            access_token: Valid Google OAuth access token with calendar scope
            transport: Optional httpx transport (tests pass a MockTransport)
            timeout: Per-request timeout in seconds
        """
        self.access_token = access_token
        self._transport = transport
        self._timeout = timeout

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    def _get_headers(self) -> dict:
        """Get authorization headers for API requests."""
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        }

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
    ) -> dict:
        """
        Make an authenticated request to the Calendar API.

        Raises:
            APIError: If the request fails
        """
        url = f"{self.BASE_URL}{endpoint}"

        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=self._get_headers(),
                    params=params,
                    timeout=self._timeout,
                )
            except httpx.RequestError as e:
                logger.error(f"Network error in Calendar API: {e}")
                raise APIError(f"Network error: {e}") from e

        if response.status_code == 401:
            logger.error("Calendar API: Unauthorized (token may be expired)")
            raise APIError(
                "Unauthorized - access token may be expired",
                status_code=401,
                response=response.text,
            )

        if response.status_code == 403:
            logger.error("Calendar API: Forbidden (scope may be missing)")
            raise APIError(
                "Forbidden - calendar scope may not be granted",
                status_code=403,
                response=response.text,
            )

        if response.status_code != 200:
            error_detail = response.text
            logger.error(f"Calendar API error: {response.status_code} - {error_detail}")
            raise APIError(
                f"API request failed: {error_detail}",
                status_code=response.status_code,
                response=error_detail,
            )

        try:
            return response.json()
        except ValueError as e:
            raise APIError("Calendar API returned invalid JSON", status_code=200) from e

    # -------------------------------------------------------------------------
    # CALENDAR EVENTS
    # -------------------------------------------------------------------------

    async def list_upcoming_events(
        self,
        calendar_id: str = "primary",
        max_results: int = 50,
        time_min: Optional[datetime] = None,
        single_events: bool = True,
        order_by: str = "startTime",
    ) -> List[CalendarEvent]:
        """
        List upcoming events from a calendar.

        Args:
            calendar_id: Calendar identifier ("primary" for user's main calendar)
            max_results: Maximum number of events to return (1-2500)
            time_min: Start of time range (defaults to now); no upper bound
            single_events: Expand recurring events into individual instances
            order_by: Sort order ("startTime" requires single_events)

        Returns:
            List of CalendarEvent objects
        """
        if time_min is None:
            time_min = datetime.now(timezone.utc)

        params = {
            "maxResults": min(max_results, 2500),
            "timeMin": time_min.isoformat(),
            "singleEvents": str(single_events).lower(),
            "orderBy": order_by,
        }

        logger.info(
            "Fetching calendar events",
            extra={
                "calendar_id": calendar_id,
                "max_results": max_results,
                "time_min": time_min.isoformat(),
            }
        )

        response_data = await self._make_request(
            method="GET",
            endpoint=f"/calendars/{calendar_id}/events",
            params=params,
        )

        try:
            events_response = CalendarEventsResponse(**response_data)
        except ValidationError as e:
            logger.error(f"Unexpected events payload: {e}")
            raise APIError("Calendar API returned an unexpected event payload") from e

        logger.info(f"Fetched {len(events_response.items)} calendar events")

        return events_response.items
