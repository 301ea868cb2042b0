"""
Google OAuth authentication.

Exports the OAuth client and the scope it requests.
"""

from calsync.environments.google.auth.client import GoogleAuthClient
from calsync.environments.google.auth.schemas import CALENDAR_SCOPES, GoogleTokenResponse

__all__ = [
    "GoogleAuthClient",
    "GoogleTokenResponse",
    "CALENDAR_SCOPES",
]
