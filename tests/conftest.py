"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Environment for calsync settings (set before any calsync import)
- Test database (SQLite in-memory for speed)
- Test client (FastAPI TestClient) with stubbed Google clients
- Store adapters and a cipher bound to a fixed test key
"""

import os

# Settings are read at import time; these must exist before calsync loads
TEST_ENCRYPTION_KEY = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"
os.environ.setdefault("ENCRYPTION_KEY", TEST_ENCRYPTION_KEY)
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("FRONTEND_URL", "http://frontend.test")

import pytest
from typing import Generator, List
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

import calsync.models  # noqa: F401  (registers tables)
from calsync.core.crypto import TokenCipher
from calsync.db.base import Base
from calsync.db.session import get_db
from calsync.deps import get_auth_client, get_calendar_client_factory, get_token_cipher
from calsync.environments.google import GoogleAuthClient
from calsync.environments.google.calendar.schemas import CalendarEvent
from calsync.main import app
from calsync.services.credential_store import CredentialStore
from calsync.services.event_mirror import EventMirror


# ---------------------------------------------------------------------------
# TEST DATABASE SETUP
# ---------------------------------------------------------------------------
# StaticPool keeps the same in-memory connection across all operations

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ---------------------------------------------------------------------------
# DATABASE FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Create a fresh database for each test function.

    - Creates all tables
    - Yields a session for the test
    - Drops all tables after test (clean slate)
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def credential_store(db: Session) -> CredentialStore:
    return CredentialStore(db)


@pytest.fixture
def event_mirror(db: Session) -> EventMirror:
    return EventMirror(db)


@pytest.fixture
def cipher() -> TokenCipher:
    return TokenCipher.from_hex(TEST_ENCRYPTION_KEY)


# ---------------------------------------------------------------------------
# PROVIDER STUBS
# ---------------------------------------------------------------------------

def make_event(event_id: str, summary=None, start=None, end=None, description=None) -> CalendarEvent:
    """Build a CalendarEvent the way the Calendar API would return it."""
    data = {
        "id": event_id,
        "start": start or {"dateTime": "2030-01-15T10:00:00Z"},
        "end": end or {"dateTime": "2030-01-15T11:00:00Z"},
    }
    if summary is not None:
        data["summary"] = summary
    if description is not None:
        data["description"] = description
    return CalendarEvent(**data)


class FakeCalendarProvider:
    """
    Stands in for GoogleCalendarClient construction.

    Called with an access token like the real class; records the tokens it
    was given and returns a client whose list_upcoming_events yields
    `events`.
    """

    def __init__(self, events: List[CalendarEvent] = None):
        self.events = events or []
        self.tokens: List[str] = []
        self.client = MagicMock()
        self.client.list_upcoming_events = AsyncMock(side_effect=lambda **kwargs: list(self.events))

    def __call__(self, access_token: str):
        self.tokens.append(access_token)
        return self.client


@pytest.fixture
def calendar_provider() -> FakeCalendarProvider:
    return FakeCalendarProvider()


@pytest.fixture
def auth_client() -> GoogleAuthClient:
    """Real URL generation; token endpoint calls are AsyncMocks."""
    client = GoogleAuthClient(
        client_id="test-client-id",
        client_secret="test-client-secret",
        redirect_uri="http://testserver/api/calendars/callback",
    )
    client.exchange_code_for_tokens = AsyncMock()
    client.refresh_access_token = AsyncMock()
    return client


# ---------------------------------------------------------------------------
# APP FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture(scope="function")
def client(
    db: Session,
    cipher: TokenCipher,
    auth_client: GoogleAuthClient,
    calendar_provider: FakeCalendarProvider,
) -> Generator[TestClient, None, None]:
    """
    Create a test client with the test database and stubbed Google clients.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_cipher] = lambda: cipher
    app.dependency_overrides[get_auth_client] = lambda: auth_client
    app.dependency_overrides[get_calendar_client_factory] = lambda: calendar_provider

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
