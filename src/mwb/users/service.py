"""
User account operations: profile edits, ratings, group order and account
deletion.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import Delete, delete, select
from sqlalchemy.exc import SQLAlchemyError

from mwb.db.models import (
    Bookmark,
    ListItem,
    ProgressItem,
    Session,
    User,
    UserGroupOrder,
    UserList,
    UserSettings,
    WatchHistoryItem,
)
from mwb.db.upsert import insert_for
from mwb.errors import InternalError, NotFound

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


# Children first, the user row last, so a retry after a partial failure
# still finds the user and picks up where it stopped.
def _delete_steps(user_id: str) -> list[tuple[str, Delete]]:
    owned_lists = select(UserList.id).where(UserList.user_id == user_id)
    return [
        ("bookmarks", delete(Bookmark).where(Bookmark.user_id == user_id)),
        ("progress", delete(ProgressItem).where(ProgressItem.user_id == user_id)),
        ("watch_history", delete(WatchHistoryItem).where(WatchHistoryItem.user_id == user_id)),
        ("settings", delete(UserSettings).where(UserSettings.user_id == user_id)),
        ("group_order", delete(UserGroupOrder).where(UserGroupOrder.user_id == user_id)),
        ("list_items", delete(ListItem).where(ListItem.list_id.in_(owned_lists))),
        ("lists", delete(UserList).where(UserList.user_id == user_id)),
        ("sessions", delete(Session).where(Session.user_id == user_id)),
        ("user", delete(User).where(User.id == user_id)),
    ]


async def require_user(db: AsyncSession, user_id: str) -> User:
    """Fetch a user or raise NotFound."""
    user = await db.get(User, user_id)
    if user is None:
        msg = "User not found"
        raise NotFound(msg)
    return user


async def update_user(
    db: AsyncSession,
    user_id: str,
    *,
    profile: dict[str, Any] | None = None,
    nickname: str | None = None,
) -> User:
    """Apply the given profile/nickname changes. Omitted fields are kept."""
    user = await require_user(db, user_id)
    if profile is not None:
        user.profile = profile
    if nickname is not None:
        user.nickname = nickname
    await db.flush()
    logger.info("user_updated", user_id=user_id, profile=profile is not None, nickname=nickname is not None)
    return user


async def delete_account(db: AsyncSession, user_id: str) -> None:
    """
    Delete a user and everything they own.

    Each step commits on its own. A failing step is reported as an
    InternalError naming the step; earlier steps stay deleted and calling
    this again finishes the job.
    """
    logger.info("account_delete_started", user_id=user_id)
    for name, stmt in _delete_steps(user_id):
        try:
            result = await db.execute(stmt.execution_options(synchronize_session=False))
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.exception("account_delete_failed", user_id=user_id, step=name)
            msg = f"Failed to delete user account ({name})"
            raise InternalError(msg) from e
        logger.debug("account_delete_step", user_id=user_id, step=name, rows=result.rowcount)
    logger.info("account_deleted", user_id=user_id)


# ---------------------------------------------------------------------------
# Ratings
# ---------------------------------------------------------------------------


async def get_ratings(db: AsyncSession, user_id: str) -> list[dict[str, Any]]:
    user = await require_user(db, user_id)
    return list(user.ratings or [])


async def upsert_rating(db: AsyncSession, user_id: str, rating: dict[str, Any]) -> dict[str, Any]:
    """Replace the rating for (tmdb_id, type) or append a new one."""
    user = await require_user(db, user_id)
    ratings = [
        r for r in (user.ratings or [])
        if not (r.get("tmdb_id") == rating["tmdb_id"] and r.get("type") == rating["type"])
    ]
    ratings.append(rating)
    # Reassign so the JSON column is marked dirty.
    user.ratings = ratings
    await db.flush()
    return rating


# ---------------------------------------------------------------------------
# Group order
# ---------------------------------------------------------------------------


async def get_group_order(db: AsyncSession, user_id: str) -> list[str]:
    result = await db.execute(select(UserGroupOrder.group_order).where(UserGroupOrder.user_id == user_id))
    order = result.scalar_one_or_none()
    return list(order or [])


async def put_group_order(db: AsyncSession, user_id: str, group_order: list[str]) -> list[str]:
    stmt = insert_for(db, UserGroupOrder).values(
        user_id=user_id,
        group_order=group_order,
        updated_at=datetime.now(timezone.utc),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id"],
        set_={"group_order": stmt.excluded.group_order, "updated_at": stmt.excluded.updated_at},
    )
    await db.execute(stmt)
    await db.flush()
    return group_order
