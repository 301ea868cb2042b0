"""
Dependencies module - reusable FastAPI dependencies for route handlers.

Process-wide collaborators (the token cipher, the Google OAuth client)
are built once from settings. Tests swap them out with
app.dependency_overrides.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from calsync.core.config import settings
from calsync.core.crypto import TokenCipher
from calsync.db.session import get_db
from calsync.environments.google import GoogleAuthClient, GoogleCalendarClient
from calsync.services.connection_manager import ConnectionManager
from calsync.services.sync_engine import CalendarClientFactory

# ---------------------------------------------------------------------------
# PROCESS-WIDE INSTANCES
# ---------------------------------------------------------------------------
# Built at import: a bad ENCRYPTION_KEY stops the app before it serves.
token_cipher = TokenCipher.from_hex(settings.ENCRYPTION_KEY)

google_auth_client = GoogleAuthClient(
    client_id=settings.GOOGLE_CLIENT_ID,
    client_secret=settings.GOOGLE_CLIENT_SECRET,
    redirect_uri=settings.GOOGLE_REDIRECT_URI,
)


def get_token_cipher() -> TokenCipher:
    return token_cipher


def get_auth_client() -> GoogleAuthClient:
    return google_auth_client


def get_calendar_client_factory() -> CalendarClientFactory:
    return GoogleCalendarClient


def get_connection_manager(
    db: Session = Depends(get_db),
    cipher: TokenCipher = Depends(get_token_cipher),
    auth_client: GoogleAuthClient = Depends(get_auth_client),
    calendar_client_factory: CalendarClientFactory = Depends(get_calendar_client_factory),
) -> ConnectionManager:
    """Request-scoped ConnectionManager bound to the request's DB session."""
    return ConnectionManager.from_session(
        db,
        cipher=cipher,
        auth_client=auth_client,
        frontend_url=settings.FRONTEND_URL,
        calendar_client_factory=calendar_client_factory,
        refresh_expired=settings.REFRESH_EXPIRED_TOKENS,
        max_results=settings.SYNC_MAX_RESULTS,
        color=settings.EVENT_COLOR,
    )
