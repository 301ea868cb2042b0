"""calsync - Google Calendar connection and event mirror service."""

__version__ = "0.1.0"
