"""Request/response schemas for watch-history endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from mwb.db.identity import decode_part
from mwb.db.models import WatchHistoryItem
from mwb.progress.schemas import IdNumber
from mwb.schemas import CamelModel, MediaMeta


class WatchHistoryInput(CamelModel):
    """A watch event as submitted by the client."""

    meta: MediaMeta
    duration: int = Field(..., ge=0)
    watched: int = Field(..., ge=0)
    watched_at: datetime
    completed: bool = False
    season_id: str | None = None
    episode_id: str | None = None
    season_number: int | None = None
    episode_number: int | None = None

    @field_validator("duration", "watched", mode="before")
    @classmethod
    def round_seconds(cls, v: Any) -> Any:  # noqa: ANN401
        if isinstance(v, float):
            return round(v)
        return v


class WatchHistoryDeleteRequest(CamelModel):
    season_id: str | None = None
    episode_id: str | None = None


class WatchHistoryItemResponse(CamelModel):
    """Flat shape returned by PUT."""

    success: bool = True
    id: str
    tmdb_id: str
    user_id: str
    season_id: str | None
    episode_id: str | None
    season_number: int | None
    episode_number: int | None
    meta: dict[str, Any]
    duration: int
    watched: int
    watched_at: datetime
    completed: bool
    updated_at: datetime


class WatchHistoryListItem(CamelModel):
    id: str
    tmdb_id: str
    episode: IdNumber
    season: IdNumber
    meta: dict[str, Any]
    duration: int
    watched: int
    watched_at: datetime
    completed: bool
    updated_at: datetime


class WatchHistoryDeleteResponse(CamelModel):
    success: bool = True
    count: int
    tmdb_id: str
    episode_id: str | None = None
    season_id: str | None = None


def history_item_response(item: WatchHistoryItem) -> WatchHistoryItemResponse:
    return WatchHistoryItemResponse(
        id=item.id,
        tmdb_id=item.tmdb_id,
        user_id=item.user_id,
        season_id=decode_part(item.season_id),
        episode_id=decode_part(item.episode_id),
        season_number=item.season_number,
        episode_number=item.episode_number,
        meta=item.meta,
        duration=int(item.duration),
        watched=int(item.watched),
        watched_at=item.watched_at,
        completed=item.completed,
        updated_at=item.updated_at,
    )


def history_list_item(item: WatchHistoryItem) -> WatchHistoryListItem:
    return WatchHistoryListItem(
        id=item.id,
        tmdb_id=item.tmdb_id,
        episode=IdNumber(id=decode_part(item.episode_id), number=item.episode_number),
        season=IdNumber(id=decode_part(item.season_id), number=item.season_number),
        meta=item.meta,
        duration=int(item.duration),
        watched=int(item.watched),
        watched_at=item.watched_at,
        completed=item.completed,
        updated_at=item.updated_at,
    )
