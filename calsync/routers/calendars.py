"""
Calendars Router - connect, callback, sync and disconnect endpoints.

Endpoints:
==========
- GET  /api/calendars/connect/google → {"authUrl": ...} for the consent screen
- GET  /api/calendars/callback       → Google redirects here; we redirect to the frontend
- POST /api/calendars/sync           → Mirror upcoming events for a user
- POST /api/calendars/disconnect     → Forget the connection and mirrored events
- GET  /api/calendars/status         → Whether a user has a stored connection
- GET  /api/calendars/events         → The mirrored events for a user

OAuth Flow:
===========
1. Frontend calls GET /connect/google?state=<userId>
2. Frontend sends the browser to the returned authUrl
3. Google redirects to /callback?code=...&state=<userId>
4. Tokens are exchanged, encrypted and stored
5. Browser lands on <FRONTEND_URL>/settings?status=connected&userId=<userId>
   (or status=error)

Errors from sync/disconnect are turned into {"error": message} responses
by the handlers registered in calsync.main.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse

from calsync.deps import get_connection_manager
from calsync.schemas.calendar import (
    AuthUrlResponse,
    ConnectionStatusResponse,
    DisconnectResponse,
    EventListResponse,
    ExternalEventResponse,
    SyncResponse,
    UserRequest,
)
from calsync.services.connection_manager import ConnectionManager


logger = logging.getLogger("calsync.routers.calendars")


router = APIRouter(prefix="/api/calendars", tags=["calendars"])


@router.get("/connect/google", response_model=AuthUrlResponse)
async def connect_google(
    state: str = Query(..., min_length=1, description="User identifier, round-tripped by Google"),
    manager: ConnectionManager = Depends(get_connection_manager),
):
    """Return the Google consent URL for the user in `state`."""
    return AuthUrlResponse(auth_url=manager.connect(state))


@router.get("/callback")
async def google_callback(
    code: Optional[str] = Query(None, description="Authorization code from Google"),
    state: Optional[str] = Query(None, description="User identifier sent in connect"),
    error: Optional[str] = Query(None, description="Error from Google"),
    manager: ConnectionManager = Depends(get_connection_manager),
):
    """
    Handle Google's redirect back to us.

    Always answers with a redirect to the frontend settings page; the
    status query parameter says whether the connection was stored.
    """
    if error:
        logger.warning(f"Google OAuth returned error: {error}")
        code = None

    result = await manager.callback(code, state)
    return RedirectResponse(url=result.redirect_url)


@router.post("/sync", response_model=SyncResponse)
async def sync_calendar(
    body: UserRequest,
    manager: ConnectionManager = Depends(get_connection_manager),
):
    """
    Replace the user's mirrored events with their upcoming Google events.

    Returns 404 {"error": "Not connected"} when no connection is stored.
    """
    result = await manager.sync(body.user_id)
    return SyncResponse(count=result.count)


@router.post("/disconnect", response_model=DisconnectResponse)
async def disconnect_calendar(
    body: UserRequest,
    manager: ConnectionManager = Depends(get_connection_manager),
):
    """Delete the stored connection and mirrored events. Always succeeds."""
    manager.disconnect(body.user_id)
    return DisconnectResponse()


@router.get("/status", response_model=ConnectionStatusResponse)
async def connection_status(
    user_id: str = Query(..., alias="userId", min_length=1),
    manager: ConnectionManager = Depends(get_connection_manager),
):
    status = manager.status(user_id)
    return ConnectionStatusResponse(
        connected=status.connected,
        expires_at=status.expires_at,
        is_expired=status.is_expired,
        updated_at=status.updated_at,
    )


@router.get("/events", response_model=EventListResponse)
async def list_events(
    user_id: str = Query(..., alias="userId", min_length=1),
    manager: ConnectionManager = Depends(get_connection_manager),
):
    events = manager.list_events(user_id)
    return EventListResponse(
        events=[
            ExternalEventResponse(
                event_id=event.event_id,
                provider=event.provider,
                title=event.title,
                start=event.start,
                end=event.end,
                color=event.color,
                description=event.description,
                all_day=event.is_all_day(),
            )
            for event in events
        ]
    )
