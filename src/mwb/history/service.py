"""
Watch history recording.

History is a log of what was watched, not resumable state: every submitted
event is stored as-is, one row per (user, title, season, episode).
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select

from mwb.db.identity import item_key
from mwb.db.models import WatchHistoryItem
from mwb.db.upsert import insert_for
from mwb.progress.rules import clamp_timestamp

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from mwb.history.schemas import WatchHistoryInput

logger = structlog.get_logger()


async def list_watch_history(db: AsyncSession, user_id: str) -> list[WatchHistoryItem]:
    """All history rows for a user, most recently watched first."""
    result = await db.execute(
        select(WatchHistoryItem)
        .where(WatchHistoryItem.user_id == user_id)
        .order_by(WatchHistoryItem.watched_at.desc())
    )
    return list(result.scalars().all())


async def record_watch(
    db: AsyncSession,
    user_id: str,
    tmdb_id: str,
    event: WatchHistoryInput,
) -> WatchHistoryItem:
    """Insert or overwrite the history row for this title/season/episode."""
    season_id, episode_id = item_key(event.meta.type, event.season_id, event.episode_id)
    is_movie = event.meta.type == "movie"
    values = {
        "id": str(uuid.uuid4()),
        "user_id": user_id,
        "tmdb_id": tmdb_id,
        "season_id": season_id,
        "episode_id": episode_id,
        "season_number": None if is_movie else event.season_number,
        "episode_number": None if is_movie else event.episode_number,
        "duration": event.duration,
        "watched": event.watched,
        "watched_at": clamp_timestamp(event.watched_at),
        "completed": event.completed,
        "meta": event.meta.model_dump(exclude_none=True),
        "updated_at": datetime.now(timezone.utc),
    }

    stmt = insert_for(db, WatchHistoryItem).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "tmdb_id", "season_id", "episode_id"],
        set_={
            "duration": stmt.excluded.duration,
            "watched": stmt.excluded.watched,
            "watched_at": stmt.excluded.watched_at,
            "completed": stmt.excluded.completed,
            "meta": stmt.excluded.meta,
            "updated_at": stmt.excluded.updated_at,
        },
    )
    result = await db.execute(
        stmt.returning(WatchHistoryItem).execution_options(populate_existing=True)
    )
    row: WatchHistoryItem = result.scalar_one()
    await db.flush()
    logger.debug("watch_recorded", user_id=user_id, tmdb_id=tmdb_id, completed=row.completed)
    return row


async def delete_watch_history(
    db: AsyncSession,
    user_id: str,
    tmdb_id: str,
    *,
    season_id: str | None = None,
    episode_id: str | None = None,
) -> int:
    """Delete history rows for a title, optionally narrowed. Returns count deleted."""
    stmt = (
        delete(WatchHistoryItem)
        .where(WatchHistoryItem.user_id == user_id)
        .where(WatchHistoryItem.tmdb_id == tmdb_id)
    )
    if season_id:
        stmt = stmt.where(WatchHistoryItem.season_id == season_id)
    if episode_id:
        stmt = stmt.where(WatchHistoryItem.episode_id == episode_id)
    result = await db.execute(stmt.execution_options(synchronize_session=False))
    await db.flush()
    return result.rowcount  # type: ignore[return-value]
