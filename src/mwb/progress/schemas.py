"""Request/response schemas for progress endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from mwb.db.identity import decode_part
from mwb.db.models import ProgressItem
from mwb.schemas import CamelModel, ProgressMeta


class ProgressInput(CamelModel):
    """A playback sample as submitted by the client."""

    meta: ProgressMeta
    tmdb_id: str | None = None
    duration: int = Field(..., ge=0)
    watched: int = Field(..., ge=0)
    season_id: str | None = None
    episode_id: str | None = None
    season_number: int | None = None
    episode_number: int | None = None
    updated_at: datetime | None = None

    @field_validator("duration", "watched", mode="before")
    @classmethod
    def round_seconds(cls, v: Any) -> Any:  # noqa: ANN401
        """Players report fractional seconds; storage is whole seconds."""
        if isinstance(v, float):
            return round(v)
        return v


class ProgressDeleteRequest(CamelModel):
    season_id: str | None = None
    episode_id: str | None = None
    meta: ProgressMeta | None = None


class ProgressItemResponse(CamelModel):
    """Flat shape returned by a single-item PUT."""

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
    updated_at: datetime


class IdNumber(CamelModel):
    id: str | None
    number: int | None


class ProgressListItem(CamelModel):
    """Nested shape returned by list and import."""

    id: str
    tmdb_id: str
    episode: IdNumber
    season: IdNumber
    meta: dict[str, Any]
    duration: int
    watched: int
    updated_at: datetime


class ProgressDeleteResponse(CamelModel):
    count: int
    tmdb_id: str
    episode_id: str | None = None
    season_id: str | None = None


class CleanupResponse(CamelModel):
    deleted_count: int
    message: str


def progress_item_response(item: ProgressItem) -> ProgressItemResponse:
    """Flat response for a single stored (or echoed) progress row."""
    return ProgressItemResponse(
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
        updated_at=item.updated_at,
    )


def progress_list_item(item: ProgressItem) -> ProgressListItem:
    return ProgressListItem(
        id=item.id,
        tmdb_id=item.tmdb_id,
        episode=IdNumber(id=decode_part(item.episode_id), number=item.episode_number),
        season=IdNumber(id=decode_part(item.season_id), number=item.season_number),
        meta=item.meta,
        duration=int(item.duration),
        watched=int(item.watched),
        updated_at=item.updated_at,
    )
