"""
Shared types for external provider integrations.

Defines the provider error hierarchy and the token structure handed from
the OAuth client to the credential store.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, Any

from calsync.core.errors import CalsyncError


# ---------------------------------------------------------------------------
# CUSTOM EXCEPTIONS
# ---------------------------------------------------------------------------
# Raised by the provider clients; routes map them to HTTP responses.


class ProviderError(CalsyncError):
    """Base exception for failures talking to the calendar provider."""
    pass


class AuthenticationError(ProviderError):
    """Raised when the authorization code exchange fails."""
    pass


class TokenExpiredError(ProviderError):
    """Raised when an OAuth token has expired and refresh failed."""
    pass


class APIError(ProviderError):
    """Raised when an API call to the provider fails."""

    def __init__(self, message: str, status_code: Optional[int] = None, response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


# ---------------------------------------------------------------------------
# DATA STRUCTURES
# ---------------------------------------------------------------------------


@dataclass
class OAuthTokens:
    """
    Token data returned by the provider's token endpoint.

    Plaintext; only lives in memory between the exchange and encryption.
    """
    access_token: str
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    scopes: Optional[List[str]] = None

    def __repr__(self) -> str:
        # Keep token values out of logs and tracebacks
        return (
            f"OAuthTokens(token_type={self.token_type!r}, "
            f"has_refresh_token={self.refresh_token is not None}, "
            f"expires_at={self.expires_at!r})"
        )
