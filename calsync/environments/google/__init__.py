"""
Google Environment Module - Google Calendar integration.

google/
├── auth/                 # OAuth 2.0 authorization code flow
│   ├── client.py
│   └── schemas.py
└── calendar/             # Calendar API v3
    ├── client.py
    └── schemas.py

Usage:
======
    auth_client = GoogleAuthClient(client_id, client_secret, redirect_uri)
    auth_url = auth_client.get_authorization_url(scopes=CALENDAR_SCOPES, state="user-123")

    # After callback
    tokens = await auth_client.exchange_code_for_tokens(code)

    calendar = GoogleCalendarClient(access_token=tokens.access_token)
    events = await calendar.list_upcoming_events()
"""

from calsync.environments.google.auth import GoogleAuthClient, CALENDAR_SCOPES
from calsync.environments.google.calendar import GoogleCalendarClient, CalendarEvent

PROVIDER = "google"

__all__ = [
    "PROVIDER",
    "GoogleAuthClient",
    "GoogleCalendarClient",
    "CalendarEvent",
    "CALENDAR_SCOPES",
]
