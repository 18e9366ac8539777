"""Bookmarks router: /users/{id}/bookmarks endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mwb.auth.dependencies import OwnerRoute, get_owner_session
from mwb.bookmarks.schemas import (
    BookmarkDeleteResponse,
    BookmarkInput,
    BookmarkResponse,
    BookmarkUpsertRequest,
    bookmark_response,
)
from mwb.bookmarks.service import delete_bookmark, list_bookmarks, upsert_bookmark
from mwb.database import get_session
from mwb.db.models import Session

router = APIRouter(prefix="/users/{id}/bookmarks", tags=["Bookmarks"], route_class=OwnerRoute)


@router.get("", response_model=list[BookmarkResponse])
async def get_bookmarks(
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> list[BookmarkResponse]:
    return [bookmark_response(b) for b in await list_bookmarks(db, session.user_id)]


@router.put("", response_model=list[BookmarkResponse])
async def put_bookmarks(
    body: list[BookmarkInput],
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> list[BookmarkResponse]:
    """Bulk upsert. Bookmarks not in the body are left alone."""
    results = []
    for item in body:
        bookmark = await upsert_bookmark(
            db,
            session.user_id,
            item.tmdb_id,
            meta=item.meta.model_dump(exclude_none=True),
            group=item.group,
            favorite_episodes=item.favorite_episodes,
        )
        results.append(bookmark_response(bookmark))
    await db.commit()
    return results


@router.post("/{tmdb_id}", response_model=BookmarkResponse)
async def post_bookmark(
    tmdb_id: str,
    body: BookmarkUpsertRequest,
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> BookmarkResponse:
    bookmark = await upsert_bookmark(
        db,
        session.user_id,
        tmdb_id,
        meta=body.meta.model_dump(exclude_none=True),
        group=body.group,
        favorite_episodes=body.favorite_episodes,
    )
    await db.commit()
    return bookmark_response(bookmark)


@router.delete("/{tmdb_id}", response_model=BookmarkDeleteResponse)
async def remove_bookmark(
    tmdb_id: str,
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> BookmarkDeleteResponse:
    await delete_bookmark(db, session.user_id, tmdb_id)
    await db.commit()
    return BookmarkDeleteResponse(tmdb_id=tmdb_id)
