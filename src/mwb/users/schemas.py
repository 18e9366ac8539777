"""Request/response schemas for user endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from mwb.auth.schemas import ProfileSchema
from mwb.db.models import Session
from mwb.schemas import CamelModel


class UpdateUserRequest(CamelModel):
    profile: ProfileSchema | None = None
    nickname: str | None = Field(default=None, min_length=1, max_length=255)


class DeleteAccountResponse(CamelModel):
    success: bool = True
    message: str = "User account deleted successfully"


class SessionListItem(CamelModel):
    id: str
    user_id: str
    created_at: datetime
    accessed_at: datetime
    expires_at: datetime
    device: str
    user_agent: str


class DeleteSessionResponse(CamelModel):
    success: bool = True
    id: str


class RatingInput(CamelModel):
    tmdb_id: int
    type: Literal["movie", "tv"]
    rating: float = Field(..., ge=0, le=10)


class RatingsResponse(CamelModel):
    user_id: str
    ratings: list[dict[str, Any]]


class RatingResponse(CamelModel):
    user_id: str
    rating: dict[str, Any]


class GroupOrderResponse(CamelModel):
    group_order: list[str]


def session_list_item(session: Session) -> SessionListItem:
    return SessionListItem(
        id=session.id,
        user_id=session.user_id,
        created_at=session.created_at,
        accessed_at=session.accessed_at,
        expires_at=session.expires_at,
        device=session.device,
        user_agent=session.user_agent,
    )
