"""
Routers module - API endpoint handlers.

- calendars: Google Calendar connection lifecycle and event mirror
"""
