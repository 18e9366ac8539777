"""Progress router: /users/{id}/progress endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mwb.auth.dependencies import OwnerRoute, get_owner_session
from mwb.database import get_session
from mwb.db.models import Session
from mwb.progress.schemas import (
    CleanupResponse,
    ProgressDeleteRequest,
    ProgressDeleteResponse,
    ProgressInput,
    ProgressItemResponse,
    ProgressListItem,
    progress_item_response,
    progress_list_item,
)
from mwb.progress.service import (
    cleanup_progress,
    delete_progress,
    import_progress,
    list_progress,
    put_progress,
)

router = APIRouter(prefix="/users/{id}/progress", tags=["Progress"], route_class=OwnerRoute)


@router.get("", response_model=list[ProgressListItem])
async def get_progress(
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> list[ProgressListItem]:
    rows = await list_progress(db, session.user_id)
    return [progress_list_item(r) for r in rows]


# Fixed paths are registered before /{tmdb_id} so they are not captured by it.


@router.delete("/cleanup", response_model=CleanupResponse)
async def cleanup(
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> CleanupResponse:
    """Drop not-started and completed noise rows."""
    deleted = await cleanup_progress(db, session.user_id)
    await db.commit()
    return CleanupResponse(deleted_count=deleted, message=f"Cleaned up {deleted} items")


@router.put("/import", response_model=list[ProgressListItem])
async def import_items(
    body: list[ProgressInput],
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> list[ProgressListItem]:
    """Merge progress exported from another device or instance."""
    rows = await import_progress(db, session.user_id, body)
    await db.commit()
    return [progress_list_item(r) for r in rows]


@router.put("/{tmdb_id}", response_model=ProgressItemResponse)
async def put_item(
    tmdb_id: str,
    body: ProgressInput,
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> ProgressItemResponse:
    item = await put_progress(db, session.user_id, tmdb_id, body)
    await db.commit()
    return progress_item_response(item)


@router.delete("/{tmdb_id}", response_model=ProgressDeleteResponse)
async def delete_item(
    tmdb_id: str,
    body: ProgressDeleteRequest | None = Body(default=None),
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> ProgressDeleteResponse:
    body = body or ProgressDeleteRequest()
    is_movie = body.meta is not None and body.meta.type == "movie"
    count = await delete_progress(
        db,
        session.user_id,
        tmdb_id,
        season_id=body.season_id,
        episode_id=body.episode_id,
        is_movie=is_movie,
    )
    await db.commit()
    return ProgressDeleteResponse(
        count=count,
        tmdb_id=tmdb_id,
        episode_id=body.episode_id,
        season_id=body.season_id,
    )
