"""Bookmark persistence. Every write is a single upsert on (user_id, tmdb_id)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import delete, select

from mwb.db.models import Bookmark
from mwb.db.upsert import insert_for

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def list_bookmarks(db: AsyncSession, user_id: str) -> list[Bookmark]:
    result = await db.execute(
        select(Bookmark).where(Bookmark.user_id == user_id).order_by(Bookmark.updated_at.desc())
    )
    return list(result.scalars().all())


async def upsert_bookmark(
    db: AsyncSession,
    user_id: str,
    tmdb_id: str,
    *,
    meta: dict[str, Any],
    group: list[str],
    favorite_episodes: list[str],
) -> Bookmark:
    stmt = insert_for(db, Bookmark).values(
        user_id=user_id,
        tmdb_id=tmdb_id,
        meta=meta,
        group=group,
        favorite_episodes=favorite_episodes,
        updated_at=datetime.now(timezone.utc),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "tmdb_id"],
        set_={
            "meta": stmt.excluded.meta,
            "group": stmt.excluded.group,
            "favorite_episodes": stmt.excluded.favorite_episodes,
            "updated_at": stmt.excluded.updated_at,
        },
    )
    result = await db.execute(stmt.returning(Bookmark).execution_options(populate_existing=True))
    bookmark: Bookmark = result.scalar_one()
    await db.flush()
    return bookmark


async def delete_bookmark(db: AsyncSession, user_id: str, tmdb_id: str) -> bool:
    result = await db.execute(
        delete(Bookmark)
        .where(Bookmark.user_id == user_id)
        .where(Bookmark.tmdb_id == tmdb_id)
        .execution_options(synchronize_session=False)
    )
    await db.flush()
    deleted = bool(result.rowcount)
    logger.info("bookmark_deleted", user_id=user_id, tmdb_id=tmdb_id, deleted=deleted)
    return deleted
