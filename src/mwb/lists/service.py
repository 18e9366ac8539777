"""User lists: named collections of titles, optionally shared publicly."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

from mwb.db.models import ListItem, UserList
from mwb.db.upsert import insert_for
from mwb.errors import Forbidden, NotFound

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from mwb.lists.schemas import CreateListRequest, ListItemInput, UpdateListRequest

logger = structlog.get_logger()


async def get_list(db: AsyncSession, list_id: str) -> UserList | None:
    """Fetch a list with its items freshly loaded."""
    result = await db.execute(
        select(UserList)
        .where(UserList.id == list_id)
        .options(selectinload(UserList.items))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_owned_list(db: AsyncSession, user_id: str, list_id: str) -> UserList:
    """
    Raises:
        NotFound: No such list.
        Forbidden: The list belongs to someone else.
    """
    user_list = await get_list(db, list_id)
    if user_list is None:
        msg = "List not found"
        raise NotFound(msg)
    if user_list.user_id != user_id:
        msg = "Cannot modify lists you don't own"
        raise Forbidden(msg)
    return user_list


async def get_public_list(db: AsyncSession, list_id: str) -> UserList:
    user_list = await get_list(db, list_id)
    if user_list is None:
        msg = "List not found"
        raise NotFound(msg)
    if not user_list.public:
        msg = "List is not public"
        raise Forbidden(msg)
    return user_list


async def list_user_lists(db: AsyncSession, user_id: str) -> list[UserList]:
    result = await db.execute(
        select(UserList)
        .where(UserList.user_id == user_id)
        .options(selectinload(UserList.items))
        .order_by(UserList.created_at)
    )
    return list(result.scalars().all())


async def _add_items(db: AsyncSession, list_id: str, items: list[ListItemInput]) -> None:
    now = datetime.now(timezone.utc)
    for item in items:
        stmt = insert_for(db, ListItem).values(
            id=str(uuid.uuid4()),
            list_id=list_id,
            tmdb_id=item.tmdb_id,
            type=item.type,
            added_at=now,
        )
        await db.execute(stmt.on_conflict_do_nothing(index_elements=["list_id", "tmdb_id"]))


async def create_list(db: AsyncSession, user_id: str, body: CreateListRequest) -> UserList:
    user_list = UserList(
        id=str(uuid.uuid4()),
        user_id=user_id,
        name=body.name,
        description=body.description,
        public=body.public,
        created_at=datetime.now(timezone.utc),
    )
    db.add(user_list)
    await db.flush()
    await _add_items(db, user_list.id, body.items)
    await db.flush()
    logger.info("list_created", user_id=user_id, list_id=user_list.id, items=len(body.items))
    return await get_owned_list(db, user_id, user_list.id)


async def update_list(db: AsyncSession, user_id: str, body: UpdateListRequest) -> UserList:
    """Apply metadata changes, then additions, then removals."""
    user_list = await get_owned_list(db, user_id, body.list_id)

    if body.name is not None:
        user_list.name = body.name
    if "description" in body.model_fields_set:
        user_list.description = body.description
    if body.public is not None:
        user_list.public = body.public
    await db.flush()

    if body.add_items:
        await _add_items(db, user_list.id, body.add_items)
    if body.remove_items:
        await db.execute(
            delete(ListItem)
            .where(ListItem.list_id == user_list.id)
            .where(ListItem.tmdb_id.in_([i.tmdb_id for i in body.remove_items]))
            .execution_options(synchronize_session=False)
        )
    await db.flush()
    return await get_owned_list(db, user_id, user_list.id)


async def delete_list(db: AsyncSession, user_id: str, list_id: str) -> None:
    user_list = await get_owned_list(db, user_id, list_id)
    await db.execute(
        delete(ListItem).where(ListItem.list_id == user_list.id).execution_options(synchronize_session=False)
    )
    await db.execute(
        delete(UserList).where(UserList.id == user_list.id).execution_options(synchronize_session=False)
    )
    await db.flush()
    logger.info("list_deleted", user_id=user_id, list_id=list_id)
