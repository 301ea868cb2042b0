"""
Calendar schemas - Pydantic models for the /api/calendars endpoints.

Field names on the wire are camelCase (userId, authUrl) to match the
frontend; Python code uses snake_case through aliases.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# REQUEST SCHEMAS
# ---------------------------------------------------------------------------

class UserRequest(BaseModel):
    """
    Body for POST /sync and POST /disconnect.

    Example request body:
    {
        "userId": "user-123"
    }
    """
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)


# ---------------------------------------------------------------------------
# RESPONSE SCHEMAS
# ---------------------------------------------------------------------------

class AuthUrlResponse(BaseModel):
    auth_url: str = Field(..., serialization_alias="authUrl")


class SyncResponse(BaseModel):
    success: bool = True
    count: int


class DisconnectResponse(BaseModel):
    success: bool = True


class ConnectionStatusResponse(BaseModel):
    connected: bool
    expires_at: Optional[datetime] = Field(None, serialization_alias="expiresAt")
    is_expired: Optional[bool] = Field(None, serialization_alias="isExpired")
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")


class ExternalEventResponse(BaseModel):
    event_id: str = Field(..., serialization_alias="eventId")
    provider: str
    title: str
    start: str
    end: str
    color: str
    description: str
    all_day: bool = Field(..., serialization_alias="allDay")


class EventListResponse(BaseModel):
    events: List[ExternalEventResponse]
