"""
OAuth Flow Controller - authorization URL generation and code exchange.

Flow:
1. start(user_id) builds the Google consent URL; the user id travels as
   the OAuth "state" value and comes back unchanged in the callback
2. callback(code, state) exchanges the code, encrypts the tokens and
   upserts the connection
3. The caller is told where to send the browser: the frontend settings
   page with status=connected&userId=<id>, or status=error

Every failure in callback() ends in the error state with nothing stored.
There is no retry; the user starts the flow again.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

from calsync.core.crypto import TokenCipher
from calsync.environments.google import CALENDAR_SCOPES, PROVIDER, GoogleAuthClient
from calsync.services.credential_store import CredentialStore


logger = logging.getLogger("calsync.services.oauth_flow")


STATUS_CONNECTED = "connected"
STATUS_ERROR = "error"


@dataclass
class CallbackResult:
    """Terminal state of one connection attempt."""
    status: str
    redirect_url: str
    user_id: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self.status == STATUS_CONNECTED


class OAuthFlowController:
    """
    Drives one OAuth connection attempt from consent URL to stored tokens.

    Args:
        auth_client: Google OAuth client
        cipher: Cipher used to encrypt tokens before storage
        credential_store: Where the connection is upserted
        frontend_url: Base URL of the frontend that receives the redirect
    """

    def __init__(
        self,
        auth_client: GoogleAuthClient,
        cipher: TokenCipher,
        credential_store: CredentialStore,
        frontend_url: str,
    ):
        self.auth_client = auth_client
        self.cipher = cipher
        self.credential_store = credential_store
        self.frontend_url = frontend_url.rstrip("/")

    def _settings_url(self, **params) -> str:
        return f"{self.frontend_url}/settings?{urlencode(params)}"

    def start(self, user_id: str) -> str:
        """Return the authorization URL for user_id."""
        auth_url = self.auth_client.get_authorization_url(
            scopes=CALENDAR_SCOPES,
            state=user_id,
            access_type="offline",
        )
        logger.info(f"Initiating Google OAuth for user {user_id}")
        return auth_url

    async def callback(self, code: Optional[str], state: Optional[str]) -> CallbackResult:
        """
        Complete the flow for the code Google sent back.

        Never raises; failures are logged and reported as the error state.
        """
        user_id = state

        try:
            if not code:
                raise ValueError("Missing authorization code")
            if not user_id:
                raise ValueError("Missing state parameter")

            tokens = await self.auth_client.exchange_code_for_tokens(code=code)

            encrypted_access = self.cipher.encrypt(tokens.access_token)
            encrypted_refresh = (
                self.cipher.encrypt(tokens.refresh_token) if tokens.refresh_token else None
            )

            self.credential_store.upsert(
                user_id=user_id,
                provider=PROVIDER,
                access_token=encrypted_access,
                refresh_token=encrypted_refresh,
                expires_at=tokens.expires_at,
            )
        except Exception:
            logger.exception(f"OAuth callback failed for state {state!r}")
            return CallbackResult(
                status=STATUS_ERROR,
                redirect_url=self._settings_url(status=STATUS_ERROR),
            )

        logger.info(f"Google calendar connected for user {user_id}")
        return CallbackResult(
            status=STATUS_CONNECTED,
            redirect_url=self._settings_url(status=STATUS_CONNECTED, userId=user_id),
            user_id=user_id,
        )
