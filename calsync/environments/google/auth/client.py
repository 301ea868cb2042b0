"""
Google OAuth Client - Handles the OAuth 2.0 authorization code flow.

Key Features:
=============
1. Authorization URL generation (read-only calendar, offline access)
2. Code-to-token exchange
3. Access token refresh from a stored refresh token

OAuth 2.0 Flow Implementation:
==============================
1. get_authorization_url() → User redirected to Google
2. exchange_code_for_tokens() → Called in callback, gets tokens
3. refresh_access_token() → Renew expired access tokens

References:
===========
- OAuth 2.0: https://developers.google.com/identity/protocols/oauth2
- Token endpoint: https://oauth2.googleapis.com/token
"""

import logging
from typing import List, Optional
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from calsync.environments.base import (
    OAuthTokens,
    AuthenticationError,
    TokenExpiredError,
)
from calsync.environments.google.auth.schemas import GoogleTokenResponse


logger = logging.getLogger("calsync.environments.google.auth")


class GoogleAuthClient:
    """
    Google OAuth 2.0 Client implementation.

    Example Usage:
        client = GoogleAuthClient(client_id, client_secret, redirect_uri)

        # Step 1: Generate auth URL
        auth_url = client.get_authorization_url(
            scopes=CALENDAR_SCOPES,
            state="user-123",
        )

        # Step 2: Handle callback
        tokens = await client.exchange_code_for_tokens(code="abc123")
    """

    # Provider identifier (used in database storage)
    provider_name = "google"

    # Google OAuth endpoints
    AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize the Google OAuth client.

        Args:
            client_id: Google OAuth Client ID
            client_secret: Google OAuth Client Secret
            redirect_uri: OAuth callback URL registered with Google
            transport: Optional httpx transport (tests pass a MockTransport)
            timeout: Per-request timeout in seconds
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self._transport = transport
        self._timeout = timeout

    # -------------------------------------------------------------------------
    # AUTHORIZATION URL
    # -------------------------------------------------------------------------

    def get_authorization_url(
        self,
        scopes: List[str],
        state: str,
        access_type: str = "offline",
        prompt: str = "consent",
    ) -> str:
        """
        Generate the Google OAuth authorization URL.

        Args:
            scopes: List of OAuth scopes to request (e.g., CALENDAR_SCOPES)
            state: Opaque value Google hands back unchanged in the callback
            access_type: "offline" for refresh token, "online" for access only
            prompt: "consent" forces consent screen (gets refresh token)

        Returns:
            Full authorization URL to redirect the user to
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(scopes),
            "state": state,
            "access_type": access_type,
            "prompt": prompt,
        }

        auth_url = f"{self.AUTHORIZATION_URL}?{urlencode(params)}"

        logger.info(
            f"Generated Google auth URL with {len(scopes)} scopes",
            extra={"scopes": scopes}
        )

        return auth_url

    # -------------------------------------------------------------------------
    # TOKEN ENDPOINT
    # -------------------------------------------------------------------------

    async def _post_token(self, data: dict) -> httpx.Response:
        async with httpx.AsyncClient(transport=self._transport) as client:
            return await client.post(
                self.TOKEN_URL,
                data=data,
                timeout=self._timeout,
            )

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            error_data = response.json() if response.content else {}
        except ValueError:
            error_data = {}
        return error_data.get("error_description") or error_data.get("error") or response.text

    async def exchange_code_for_tokens(self, code: str) -> OAuthTokens:
        """
        Exchange authorization code for access and refresh tokens.

        Args:
            code: Authorization code from Google callback

        Returns:
            OAuthTokens with access_token, refresh_token, expiration

        Raises:
            AuthenticationError: If the exchange fails (invalid or expired
                code, revoked consent, network error)
        """
        token_data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.redirect_uri,
        }

        logger.info("Exchanging authorization code for tokens")

        try:
            response = await self._post_token(token_data)
        except httpx.RequestError as e:
            logger.error(f"Network error during token exchange: {e}")
            raise AuthenticationError(f"Network error: {e}") from e

        if response.status_code != 200:
            error_msg = self._error_message(response)
            logger.error(f"Token exchange failed: {error_msg}")
            raise AuthenticationError(f"Token exchange failed: {error_msg}")

        try:
            token_response = GoogleTokenResponse(**response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Unexpected token response: {e}")
            raise AuthenticationError("Token endpoint returned an unexpected response") from e

        logger.info(
            "Successfully obtained Google tokens",
            extra={
                "has_refresh_token": token_response.refresh_token is not None,
                "expires_in": token_response.expires_in,
            }
        )

        return OAuthTokens(
            access_token=token_response.access_token,
            token_type=token_response.token_type,
            refresh_token=token_response.refresh_token,
            expires_at=token_response.get_expires_at(),
            scopes=token_response.get_scopes_list(),
        )

    async def refresh_access_token(self, refresh_token: str) -> OAuthTokens:
        """
        Use refresh token to get a new access token.

        Args:
            refresh_token: The refresh token from initial authorization

        Returns:
            OAuthTokens with new access_token (refresh_token kept if Google
            does not rotate it)

        Raises:
            TokenExpiredError: If refresh token is invalid or revoked
        """
        refresh_data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }

        logger.info("Refreshing access token")

        try:
            response = await self._post_token(refresh_data)
        except httpx.RequestError as e:
            logger.error(f"Network error during token refresh: {e}")
            raise TokenExpiredError(f"Network error: {e}") from e

        if response.status_code != 200:
            error_msg = self._error_message(response)
            logger.error(f"Token refresh failed: {error_msg}")
            raise TokenExpiredError(f"Token refresh failed: {error_msg}")

        try:
            token_response = GoogleTokenResponse(**response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Unexpected token response: {e}")
            raise TokenExpiredError("Token endpoint returned an unexpected response") from e

        logger.info(
            "Successfully refreshed access token",
            extra={"expires_in": token_response.expires_in}
        )

        return OAuthTokens(
            access_token=token_response.access_token,
            token_type=token_response.token_type,
            refresh_token=token_response.refresh_token or refresh_token,
            expires_at=token_response.get_expires_at(),
            scopes=token_response.get_scopes_list(),
        )
