"""
Environments Module - External calendar provider integration.

environments/
├── base.py               # Provider errors and token structure
└── google/
    ├── auth/             # OAuth 2.0 authorization code flow
    └── calendar/         # Calendar API v3 event listing
"""

from calsync.environments.base import (
    ProviderError,
    AuthenticationError,
    TokenExpiredError,
    APIError,
    OAuthTokens,
)

__all__ = [
    "ProviderError",
    "AuthenticationError",
    "TokenExpiredError",
    "APIError",
    "OAuthTokens",
]
