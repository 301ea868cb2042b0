"""
Tests for SyncEngine.

These tests verify:
- Sync without a stored connection raises NotConnectedError and leaves
  mirrored events alone
- The decrypted access token is handed to the calendar client
- Remote events are normalized (title, start/end, description, color)
- The snapshot is replaced, never merged
- Provider and decryption failures propagate without touching the snapshot
- Optional refresh of an expired access token
- Concurrent syncs for one user do not interleave
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from calsync.core.crypto import TokenCipher
from calsync.core.errors import DecryptionError, NotConnectedError
from calsync.environments.base import APIError, OAuthTokens
from calsync.environments.google import GoogleAuthClient
from calsync.services.credential_store import CredentialStore
from calsync.services.event_mirror import EventMirror, MirroredEvent
from calsync.services.sync_engine import SyncEngine, normalize_event

from conftest import FakeCalendarProvider, make_event


def _store_connection(store: CredentialStore, cipher: TokenCipher, expires_at=None, refresh="r"):
    store.upsert(
        user_id="u1",
        provider="google",
        access_token=cipher.encrypt("a"),
        refresh_token=cipher.encrypt(refresh) if refresh else None,
        expires_at=expires_at or datetime.now(timezone.utc) + timedelta(hours=1),
    )


def _seed_snapshot(mirror: EventMirror, count: int):
    mirror.replace_all(
        "u1",
        "google",
        [
            MirroredEvent(
                event_id=f"old-{i}", title="Old", start="2029-01-01", end="2029-01-02", color="#4285f4"
            )
            for i in range(count)
        ],
    )


@pytest.fixture
def engine(
    credential_store: CredentialStore,
    event_mirror: EventMirror,
    cipher: TokenCipher,
    calendar_provider: FakeCalendarProvider,
) -> SyncEngine:
    return SyncEngine(
        credential_store=credential_store,
        event_mirror=event_mirror,
        cipher=cipher,
        calendar_client_factory=calendar_provider,
    )


class TestNormalizeEvent:
    """Tests for normalize_event()."""

    def test_timed_event(self):
        event = make_event("e1", summary="Standup", description="Daily")

        mirrored = normalize_event(event)

        assert mirrored == MirroredEvent(
            event_id="e1",
            title="Standup",
            start="2030-01-15T10:00:00Z",
            end="2030-01-15T11:00:00Z",
            color="#4285f4",
            description="Daily",
        )

    def test_defaults(self):
        """Should fill in the placeholder title and empty description."""
        event = make_event("e2", start={"date": "2030-02-01"}, end={"date": "2030-02-02"})

        mirrored = normalize_event(event, color="#000000")

        assert mirrored.title == "No title"
        assert mirrored.description == ""
        assert mirrored.start == "2030-02-01"
        assert mirrored.end == "2030-02-02"
        assert mirrored.color == "#000000"

    def test_prefers_date_time_over_date(self):
        event = make_event(
            "e3",
            start={"dateTime": "2030-02-01T08:00:00Z", "date": "2030-02-01"},
            end={"dateTime": "2030-02-01T09:00:00Z"},
        )

        assert normalize_event(event).start == "2030-02-01T08:00:00Z"


class TestSync:
    """Tests for SyncEngine.sync()."""

    @pytest.mark.asyncio
    async def test_not_connected(self, engine: SyncEngine, event_mirror: EventMirror, calendar_provider):
        """Should raise NotConnectedError and leave stored events alone."""
        _seed_snapshot(event_mirror, 2)

        with pytest.raises(NotConnectedError):
            await engine.sync("u1")

        assert len(event_mirror.list_events("u1", "google")) == 2
        assert calendar_provider.tokens == []

    @pytest.mark.asyncio
    async def test_replaces_snapshot(
        self, engine: SyncEngine, credential_store, event_mirror, cipher, calendar_provider
    ):
        """Should leave exactly the provider's events after sync."""
        _store_connection(credential_store, cipher)
        _seed_snapshot(event_mirror, 5)
        calendar_provider.events = [make_event("n1", summary="A"), make_event("n2"), make_event("n3")]

        result = await engine.sync("u1")

        assert result.count == 3
        assert calendar_provider.tokens == ["a"]
        stored = event_mirror.list_events("u1", "google")
        assert sorted(e.event_id for e in stored) == ["n1", "n2", "n3"]
        assert all(e.color == "#4285f4" for e in stored)

    @pytest.mark.asyncio
    async def test_fetch_parameters(self, engine: SyncEngine, credential_store, cipher, calendar_provider):
        _store_connection(credential_store, cipher)

        await engine.sync("u1")

        calendar_provider.client.list_upcoming_events.assert_awaited_once_with(
            calendar_id="primary",
            max_results=50,
            single_events=True,
            order_by="startTime",
        )

    @pytest.mark.asyncio
    async def test_empty_response_clears_snapshot(
        self, engine: SyncEngine, credential_store, event_mirror, cipher
    ):
        _store_connection(credential_store, cipher)
        _seed_snapshot(event_mirror, 3)

        result = await engine.sync("u1")

        assert result.count == 0
        assert event_mirror.list_events("u1", "google") == []

    @pytest.mark.asyncio
    async def test_provider_error_keeps_snapshot(
        self, engine: SyncEngine, credential_store, event_mirror, cipher, calendar_provider
    ):
        _store_connection(credential_store, cipher)
        _seed_snapshot(event_mirror, 2)
        calendar_provider.client.list_upcoming_events.side_effect = APIError("Unauthorized", status_code=401)

        with pytest.raises(APIError):
            await engine.sync("u1")

        assert len(event_mirror.list_events("u1", "google")) == 2

    @pytest.mark.asyncio
    async def test_undecryptable_token(self, engine: SyncEngine, credential_store, calendar_provider):
        credential_store.upsert("u1", "google", "garbage-without-separator", None, None)

        with pytest.raises(DecryptionError):
            await engine.sync("u1")

        assert calendar_provider.tokens == []

    @pytest.mark.asyncio
    async def test_expired_token_used_as_is_by_default(
        self, engine: SyncEngine, credential_store, cipher, calendar_provider
    ):
        _store_connection(credential_store, cipher, expires_at=datetime(2000, 1, 1, tzinfo=timezone.utc))

        await engine.sync("u1")

        assert calendar_provider.tokens == ["a"]

    @pytest.mark.asyncio
    async def test_concurrent_syncs_do_not_interleave(
        self, engine: SyncEngine, credential_store, event_mirror, cipher, calendar_provider
    ):
        """Should finish one sync before the next one fetches."""
        _store_connection(credential_store, cipher)
        in_flight = []
        overlaps = []

        async def slow_fetch(**kwargs):
            if in_flight:
                overlaps.append(True)
            in_flight.append(True)
            await asyncio.sleep(0.01)
            in_flight.pop()
            return [make_event("e1"), make_event("e2")]

        calendar_provider.client.list_upcoming_events.side_effect = slow_fetch

        results = await asyncio.gather(engine.sync("u1"), engine.sync("u1"))

        assert [r.count for r in results] == [2, 2]
        assert overlaps == []
        assert len(event_mirror.list_events("u1", "google")) == 2


class TestRefreshExpired:
    """Tests for the optional refresh-before-sync step."""

    @pytest.fixture
    def refreshing_engine(
        self, credential_store, event_mirror, cipher, calendar_provider, auth_client: GoogleAuthClient
    ) -> SyncEngine:
        return SyncEngine(
            credential_store=credential_store,
            event_mirror=event_mirror,
            cipher=cipher,
            calendar_client_factory=calendar_provider,
            auth_client=auth_client,
            refresh_expired=True,
        )

    def test_requires_auth_client(self, credential_store, event_mirror, cipher):
        with pytest.raises(ValueError):
            SyncEngine(credential_store, event_mirror, cipher, refresh_expired=True)

    @pytest.mark.asyncio
    async def test_refreshes_and_stores_new_token(
        self, refreshing_engine, credential_store, cipher, calendar_provider, auth_client
    ):
        _store_connection(credential_store, cipher, expires_at=datetime(2000, 1, 1, tzinfo=timezone.utc))
        new_expiry = datetime.now(timezone.utc) + timedelta(hours=1)
        auth_client.refresh_access_token.return_value = OAuthTokens(
            access_token="fresh", refresh_token="r", expires_at=new_expiry
        )

        await refreshing_engine.sync("u1")

        auth_client.refresh_access_token.assert_awaited_once_with("r")
        assert calendar_provider.tokens == ["fresh"]
        connection = credential_store.get("u1", "google")
        assert cipher.decrypt(connection.access_token) == "fresh"
        assert connection.is_expired() is False

    @pytest.mark.asyncio
    async def test_valid_token_not_refreshed(
        self, refreshing_engine, credential_store, cipher, calendar_provider, auth_client
    ):
        _store_connection(credential_store, cipher)

        await refreshing_engine.sync("u1")

        auth_client.refresh_access_token.assert_not_awaited()
        assert calendar_provider.tokens == ["a"]

    @pytest.mark.asyncio
    async def test_no_refresh_token(
        self, refreshing_engine, credential_store, cipher, calendar_provider, auth_client
    ):
        _store_connection(
            credential_store, cipher, expires_at=datetime(2000, 1, 1, tzinfo=timezone.utc), refresh=None
        )

        await refreshing_engine.sync("u1")

        auth_client.refresh_access_token.assert_not_awaited()
        assert calendar_provider.tokens == ["a"]
