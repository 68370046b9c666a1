"""
Session and collection schemas.

Dependencies: pydantic
System role: Session-clear and collection debug API contracts
"""

from datetime import datetime

from pydantic import BaseModel, Field


class ClearSessionRequest(BaseModel):
    """Request schema for clearing a session."""

    session_id: str | None = Field(default=None, description="Caller session token")


class ClearSessionResponse(BaseModel):
    """Response schema for clearing a session."""

    message: str
    session_id: str
    cleared: bool


class CollectionResponse(BaseModel):
    """One session collection in the debug listing."""

    name: str
    session_id: str | None = None
    points_count: int
    created_at: datetime | None = None
    active: bool = False


class CollectionListResponse(BaseModel):
    """Debug listing of session collections."""

    collections: list[CollectionResponse]
    total: int


class SweepResponse(BaseModel):
    """Result of a stale-collection sweep."""

    message: str
    deleted: list[str]
