"""
Connection Manager - the operations the HTTP layer calls.

    connect     → OAuthFlowController.start
    callback    → OAuthFlowController.callback
    sync        → SyncEngine.sync
    disconnect  → delete the connection and the mirrored events
    status      → what is stored for the user
    list_events → the current mirrored snapshot

This is the only write path for CalendarConnection and ExternalEvent rows.

Usage:
    manager = ConnectionManager.from_session(db, cipher, auth_client)
    auth_url = manager.connect("user-123")
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from calsync.core.crypto import TokenCipher
from calsync.environments.google import PROVIDER, GoogleAuthClient, GoogleCalendarClient
from calsync.models.external_event import ExternalEvent
from calsync.services.credential_store import CredentialStore
from calsync.services.event_mirror import EventMirror
from calsync.services.oauth_flow import CallbackResult, OAuthFlowController
from calsync.services.sync_engine import (
    CalendarClientFactory,
    DEFAULT_COLOR,
    DEFAULT_MAX_RESULTS,
    SyncEngine,
    SyncResult,
)


logger = logging.getLogger("calsync.services.connection_manager")


@dataclass
class ConnectionStatus:
    connected: bool
    expires_at: Optional[datetime] = None
    is_expired: Optional[bool] = None
    updated_at: Optional[datetime] = None


class ConnectionManager:
    """Ties the OAuth flow, the sync engine and both store adapters together."""

    def __init__(
        self,
        credential_store: CredentialStore,
        event_mirror: EventMirror,
        oauth_flow: OAuthFlowController,
        sync_engine: SyncEngine,
        provider: str = PROVIDER,
    ):
        self.credential_store = credential_store
        self.event_mirror = event_mirror
        self.oauth_flow = oauth_flow
        self.sync_engine = sync_engine
        self.provider = provider

    @classmethod
    def from_session(
        cls,
        db: Session,
        cipher: TokenCipher,
        auth_client: GoogleAuthClient,
        frontend_url: str = "http://localhost:5173",
        calendar_client_factory: CalendarClientFactory = GoogleCalendarClient,
        refresh_expired: bool = False,
        max_results: int = DEFAULT_MAX_RESULTS,
        color: str = DEFAULT_COLOR,
    ) -> "ConnectionManager":
        """Build a manager whose adapters share one request-scoped session."""
        credential_store = CredentialStore(db)
        event_mirror = EventMirror(db)
        return cls(
            credential_store=credential_store,
            event_mirror=event_mirror,
            oauth_flow=OAuthFlowController(
                auth_client=auth_client,
                cipher=cipher,
                credential_store=credential_store,
                frontend_url=frontend_url,
            ),
            sync_engine=SyncEngine(
                credential_store=credential_store,
                event_mirror=event_mirror,
                cipher=cipher,
                calendar_client_factory=calendar_client_factory,
                auth_client=auth_client,
                refresh_expired=refresh_expired,
                max_results=max_results,
                color=color,
            ),
        )

    def connect(self, user_id: str) -> str:
        return self.oauth_flow.start(user_id)

    async def callback(self, code: Optional[str], state: Optional[str]) -> CallbackResult:
        return await self.oauth_flow.callback(code, state)

    async def sync(self, user_id: str) -> SyncResult:
        return await self.sync_engine.sync(user_id)

    def disconnect(self, user_id: str) -> None:
        """Remove everything stored for the user. Safe to repeat."""
        self.credential_store.delete(user_id, self.provider)
        self.event_mirror.delete_all(user_id, self.provider)
        logger.info(f"Disconnected {self.provider} calendar for user {user_id}")

    def status(self, user_id: str) -> ConnectionStatus:
        connection = self.credential_store.get(user_id, self.provider)
        if connection is None:
            return ConnectionStatus(connected=False)
        return ConnectionStatus(
            connected=True,
            expires_at=connection.expires_at,
            is_expired=connection.is_expired(),
            updated_at=connection.updated_at,
        )

    def list_events(self, user_id: str) -> List[ExternalEvent]:
        return self.event_mirror.list_events(user_id, self.provider)
