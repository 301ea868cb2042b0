"""
Application error taxonomy.

Provider-side failures (token exchange, event fetch) live with the
provider clients in calsync.environments.base. Store failures are the
database driver's own errors, re-exported here as StoreError so callers
have one place to import from.
"""

from sqlalchemy.exc import SQLAlchemyError


class CalsyncError(Exception):
    """Base exception for all calsync errors."""
    pass


class ConfigurationError(CalsyncError):
    """Raised at boot when required configuration is missing or malformed."""
    pass


class DecryptionError(CalsyncError):
    """Raised when a stored token cannot be decrypted with the current key."""
    pass


class NotConnectedError(CalsyncError):
    """Raised when a user has no stored connection for the provider."""

    def __init__(self, user_id: str, provider: str):
        super().__init__(f"User {user_id} is not connected to {provider}")
        self.user_id = user_id
        self.provider = provider


# Store errors propagate unchanged from SQLAlchemy.
StoreError = SQLAlchemyError
