"""
Sync Engine - mirrors a user's upcoming Google events into local storage.

Algorithm:
1. Load the stored connection (NotConnectedError if there is none)
2. Decrypt the access token and bind a calendar client to it
3. Fetch up to max_results single-instance events from "primary",
   starting now, ordered by start time, with no upper bound
4. Normalize each event (title, start/end, description, color)
5. Replace the stored snapshot with the normalized list
6. Return how many events were stored

By default an expired access token is used as-is and the provider call
fails upstream. With refresh_expired=True the stored refresh token is
exchanged for a new access token first.

Syncs for the same (user, provider) are serialized within the process.
Nothing is retried.
"""

import asyncio
import logging
import weakref
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from calsync.core.crypto import TokenCipher
from calsync.core.errors import NotConnectedError
from calsync.environments.google import PROVIDER, CalendarEvent, GoogleAuthClient, GoogleCalendarClient
from calsync.models.calendar_connection import CalendarConnection
from calsync.services.credential_store import CredentialStore
from calsync.services.event_mirror import EventMirror, MirroredEvent


logger = logging.getLogger("calsync.services.sync_engine")


DEFAULT_TITLE = "No title"
DEFAULT_COLOR = "#4285f4"  # Google Blue
DEFAULT_MAX_RESULTS = 50

CalendarClientFactory = Callable[[str], GoogleCalendarClient]


# ---------------------------------------------------------------------------
# PER-KEY LOCKS
# ---------------------------------------------------------------------------
# A lock lives only while some sync holds or waits on it.
_sync_locks: "weakref.WeakValueDictionary[Tuple[str, str], asyncio.Lock]" = (
    weakref.WeakValueDictionary()
)


def _lock_for(user_id: str, provider: str) -> asyncio.Lock:
    key = (user_id, provider)
    lock = _sync_locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _sync_locks[key] = lock
    return lock


@dataclass
class SyncResult:
    count: int


def normalize_event(event: CalendarEvent, color: str = DEFAULT_COLOR) -> MirroredEvent:
    """Convert a provider event into the stored shape."""
    return MirroredEvent(
        event_id=event.id,
        title=event.summary or DEFAULT_TITLE,
        start=event.start.value(),
        end=event.end.value(),
        color=color,
        description=event.description or "",
    )


class SyncEngine:
    """
    Fetches remote events for a stored connection and replaces the mirror.

    Args:
        credential_store: Source of the stored connection
        event_mirror: Destination for the normalized events
        cipher: Decrypts (and, when refreshing, re-encrypts) tokens
        calendar_client_factory: Builds a calendar client for an access token
        auth_client: Needed only when refresh_expired is enabled
        refresh_expired: Refresh an expired access token before fetching
        max_results: Size of the fetched event window
        color: Display color stamped on every mirrored event
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        event_mirror: EventMirror,
        cipher: TokenCipher,
        calendar_client_factory: CalendarClientFactory = GoogleCalendarClient,
        auth_client: Optional[GoogleAuthClient] = None,
        refresh_expired: bool = False,
        max_results: int = DEFAULT_MAX_RESULTS,
        color: str = DEFAULT_COLOR,
        provider: str = PROVIDER,
    ):
        if refresh_expired and auth_client is None:
            raise ValueError("refresh_expired requires an auth_client")

        self.credential_store = credential_store
        self.event_mirror = event_mirror
        self.cipher = cipher
        self.calendar_client_factory = calendar_client_factory
        self.auth_client = auth_client
        self.refresh_expired = refresh_expired
        self.max_results = max_results
        self.color = color
        self.provider = provider

    async def sync(self, user_id: str) -> SyncResult:
        """
        Replace the stored snapshot for user_id with the provider's events.

        Raises:
            NotConnectedError: No stored connection for the user
            DecryptionError: Stored token cannot be decrypted
            ProviderError: Token refresh or event fetch failed
            StoreError: Reading or writing the store failed
        """
        async with _lock_for(user_id, self.provider):
            connection = self.credential_store.get(user_id, self.provider)
            if connection is None:
                logger.info(f"Sync requested for unconnected user {user_id}")
                raise NotConnectedError(user_id, self.provider)

            access_token = await self._access_token(connection)

            calendar = self.calendar_client_factory(access_token)
            remote_events = await calendar.list_upcoming_events(
                calendar_id="primary",
                max_results=self.max_results,
                single_events=True,
                order_by="startTime",
            )

            events = self._normalize(remote_events)
            count = self.event_mirror.replace_all(user_id, self.provider, events)

        logger.info(f"Synced {count} {self.provider} events for user {user_id}")
        return SyncResult(count=count)

    def _normalize(self, remote_events: List[CalendarEvent]) -> List[MirroredEvent]:
        return [normalize_event(event, self.color) for event in remote_events]

    async def _access_token(self, connection: CalendarConnection) -> str:
        access_token = self.cipher.decrypt(connection.access_token)

        if not self.refresh_expired or not connection.is_expired():
            return access_token

        if connection.refresh_token is None:
            logger.warning(
                f"Access token for user {connection.user_id} is expired and no "
                "refresh token is stored; using it as-is"
            )
            return access_token

        refresh_token = self.cipher.decrypt(connection.refresh_token)
        tokens = await self.auth_client.refresh_access_token(refresh_token)

        self.credential_store.upsert(
            user_id=connection.user_id,
            provider=connection.provider,
            access_token=self.cipher.encrypt(tokens.access_token),
            refresh_token=self.cipher.encrypt(tokens.refresh_token or refresh_token),
            expires_at=tokens.expires_at,
        )
        logger.info(f"Refreshed access token for user {connection.user_id}")

        return tokens.access_token
