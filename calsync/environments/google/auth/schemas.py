"""
Google OAuth Schemas - Data structures for Google authentication.

Using Pydantic models ensures the token endpoint response is validated
before anything is encrypted and stored.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, List

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# OAUTH SCOPE CONSTANTS
# ---------------------------------------------------------------------------
# Reference: https://developers.google.com/identity/protocols/oauth2/scopes

# Read-only access to calendars and events; nothing is ever written back
CALENDAR_SCOPES = [
    "https://www.googleapis.com/auth/calendar.readonly",
]


# ---------------------------------------------------------------------------
# TOKEN RESPONSES
# ---------------------------------------------------------------------------

class GoogleTokenResponse(BaseModel):
    """
    Response from Google's token endpoint.

    Returned both for the authorization code exchange and for refreshes.

    Example response from Google:
    {
        "access_token": "ya29.a0AfB_byC...",
        "expires_in": 3599,
        "refresh_token": "1//0eXyz...",
        "scope": "https://www.googleapis.com/auth/calendar.readonly",
        "token_type": "Bearer"
    }
    """
    access_token: str = Field(..., description="OAuth access token")
    token_type: str = Field(default="Bearer", description="Token type (usually Bearer)")
    expires_in: Optional[int] = Field(None, description="Seconds until expiration")
    refresh_token: Optional[str] = Field(None, description="Refresh token for renewal")
    scope: Optional[str] = Field(None, description="Space-separated scopes granted")

    def get_scopes_list(self) -> List[str]:
        """Convert space-separated scope string to list."""
        if self.scope:
            return self.scope.split()
        return []

    def get_expires_at(self, now: Optional[datetime] = None) -> Optional[datetime]:
        """Calculate expiration datetime from expires_in seconds."""
        if self.expires_in is None:
            return None
        now = now or datetime.now(timezone.utc)
        return now + timedelta(seconds=self.expires_in)
