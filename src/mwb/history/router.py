"""Watch history router: /users/{id}/watch-history endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mwb.auth.dependencies import OwnerRoute, get_owner_session
from mwb.database import get_session
from mwb.db.models import Session
from mwb.history.schemas import (
    WatchHistoryDeleteRequest,
    WatchHistoryDeleteResponse,
    WatchHistoryInput,
    WatchHistoryItemResponse,
    WatchHistoryListItem,
    history_item_response,
    history_list_item,
)
from mwb.history.service import delete_watch_history, list_watch_history, record_watch

router = APIRouter(prefix="/users/{id}/watch-history", tags=["Watch History"], route_class=OwnerRoute)


@router.get("", response_model=list[WatchHistoryListItem])
async def get_history(
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> list[WatchHistoryListItem]:
    rows = await list_watch_history(db, session.user_id)
    return [history_list_item(r) for r in rows]


@router.put("/{tmdb_id}", response_model=WatchHistoryItemResponse)
async def put_history(
    tmdb_id: str,
    body: WatchHistoryInput,
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> WatchHistoryItemResponse:
    row = await record_watch(db, session.user_id, tmdb_id, body)
    await db.commit()
    return history_item_response(row)


@router.delete("/{tmdb_id}", response_model=WatchHistoryDeleteResponse)
async def delete_history(
    tmdb_id: str,
    body: WatchHistoryDeleteRequest | None = Body(default=None),
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> WatchHistoryDeleteResponse:
    body = body or WatchHistoryDeleteRequest()
    count = await delete_watch_history(
        db,
        session.user_id,
        tmdb_id,
        season_id=body.season_id,
        episode_id=body.episode_id,
    )
    await db.commit()
    return WatchHistoryDeleteResponse(
        count=count,
        tmdb_id=tmdb_id,
        episode_id=body.episode_id,
        season_id=body.season_id,
    )
