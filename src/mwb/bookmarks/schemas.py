"""Request/response schemas for bookmark endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import field_validator

from mwb.db.models import Bookmark
from mwb.schemas import CamelModel, MediaMeta


def _as_group_list(v: Any) -> Any:  # noqa: ANN401
    if v is None:
        return []
    if isinstance(v, str):
        return [v]
    return v


class BookmarkInput(CamelModel):
    """One bookmark in a bulk PUT. ``group`` may be a single name or a list."""

    tmdb_id: str
    meta: MediaMeta
    group: list[str] = []
    favorite_episodes: list[str] = []

    normalize_group = field_validator("group", mode="before")(_as_group_list)


class BookmarkUpsertRequest(CamelModel):
    meta: MediaMeta
    group: list[str] = []
    favorite_episodes: list[str] = []

    normalize_group = field_validator("group", mode="before")(_as_group_list)


class BookmarkResponse(CamelModel):
    tmdb_id: str
    meta: dict[str, Any]
    group: list[str]
    favorite_episodes: list[str]
    updated_at: datetime


class BookmarkDeleteResponse(CamelModel):
    success: bool = True
    tmdb_id: str


def bookmark_response(bookmark: Bookmark) -> BookmarkResponse:
    return BookmarkResponse(
        tmdb_id=bookmark.tmdb_id,
        meta=bookmark.meta,
        group=bookmark.group or [],
        favorite_episodes=bookmark.favorite_episodes or [],
        updated_at=bookmark.updated_at,
    )
