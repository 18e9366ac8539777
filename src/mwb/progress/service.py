"""
Watch progress business logic.

Progress rows are keyed by (user, title, season, episode). Writes go through
a single INSERT ... ON CONFLICT statement so two devices racing on the same
key cannot lose an update.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from mwb.db.identity import encode_part, item_key
from mwb.db.models import ProgressItem
from mwb.db.upsert import insert_for
from mwb.errors import InternalError
from mwb.progress.rules import any_acceptable, clamp_timestamp, is_acceptable, select_cleanup_ids

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from mwb.progress.schemas import ProgressInput

logger = structlog.get_logger()

_IDENTITY = ["user_id", "tmdb_id", "season_id", "episode_id"]


async def list_progress(db: AsyncSession, user_id: str) -> list[ProgressItem]:
    """All progress rows for a user, most recently updated first."""
    result = await db.execute(
        select(ProgressItem).where(ProgressItem.user_id == user_id).order_by(ProgressItem.updated_at.desc())
    )
    return list(result.scalars().all())


async def should_save_progress(
    db: AsyncSession,
    user_id: str,
    tmdb_id: str,
    candidate: ProgressInput,
) -> bool:
    """
    Decide whether a sample is worth persisting.

    Movies and episodes are kept when acceptable. A not-started or completed
    episode is kept only if another episode of the same season already has
    acceptable progress, so season continuity markers survive while
    open-and-close noise does not.
    """
    if is_acceptable(candidate.duration, candidate.watched):
        return True
    if candidate.meta.type == "movie":
        return False
    if not candidate.season_id:
        return False

    result = await db.execute(
        select(ProgressItem.duration, ProgressItem.watched)
        .where(ProgressItem.user_id == user_id)
        .where(ProgressItem.tmdb_id == tmdb_id)
        .where(ProgressItem.season_id == encode_part(candidate.season_id))
        .where(ProgressItem.episode_id != encode_part(candidate.episode_id))
    )
    return any_acceptable(result.all())


def _upsert_statement(db: AsyncSession, values: dict[str, Any], *, monotonic: bool = False) -> Any:  # noqa: ANN401
    stmt = insert_for(db, ProgressItem).values(**values)
    update_set = {
        "duration": stmt.excluded.duration,
        "watched": stmt.excluded.watched,
        "meta": stmt.excluded.meta,
        "updated_at": stmt.excluded.updated_at,
    }
    if monotonic:
        stmt = stmt.on_conflict_do_update(
            index_elements=_IDENTITY,
            set_=update_set,
            where=ProgressItem.watched < stmt.excluded.watched,
        )
    else:
        stmt = stmt.on_conflict_do_update(index_elements=_IDENTITY, set_=update_set)
    return stmt.returning(ProgressItem).execution_options(populate_existing=True)


def _row_values(user_id: str, tmdb_id: str, item: ProgressInput) -> dict[str, Any]:
    season_id, episode_id = item_key(item.meta.type, item.season_id, item.episode_id)
    is_movie = item.meta.type == "movie"
    return {
        "id": str(uuid.uuid4()),
        "user_id": user_id,
        "tmdb_id": tmdb_id,
        "season_id": season_id,
        "episode_id": episode_id,
        "season_number": None if is_movie else item.season_number,
        "episode_number": None if is_movie else item.episode_number,
        "duration": item.duration,
        "watched": item.watched,
        "meta": item.meta.model_dump(exclude_none=True),
        "updated_at": clamp_timestamp(item.updated_at),
    }


async def put_progress(
    db: AsyncSession,
    user_id: str,
    tmdb_id: str,
    item: ProgressInput,
) -> ProgressItem:
    """
    Upsert a progress sample.

    When the sample is not worth saving nothing is written and a transient,
    unsaved ``ProgressItem`` (``id == ""``) echoing the input is returned so
    the client's optimistic state stays consistent.
    """
    values = _row_values(user_id, tmdb_id, item)

    if not await should_save_progress(db, user_id, tmdb_id, item):
        logger.debug("progress_skipped", user_id=user_id, tmdb_id=tmdb_id)
        return ProgressItem(**{**values, "id": ""})

    result = await db.execute(_upsert_statement(db, values))
    row: ProgressItem = result.scalar_one()
    await db.flush()
    return row


async def delete_progress(
    db: AsyncSession,
    user_id: str,
    tmdb_id: str,
    *,
    season_id: str | None = None,
    episode_id: str | None = None,
    is_movie: bool = False,
) -> int:
    """Delete progress rows for a title, optionally narrowed. Returns count deleted."""
    stmt = delete(ProgressItem).where(ProgressItem.user_id == user_id).where(ProgressItem.tmdb_id == tmdb_id)
    if is_movie:
        movie_season, movie_episode = item_key("movie", None, None)
        stmt = stmt.where(ProgressItem.season_id == movie_season).where(ProgressItem.episode_id == movie_episode)
    else:
        if season_id:
            stmt = stmt.where(ProgressItem.season_id == season_id)
        if episode_id:
            stmt = stmt.where(ProgressItem.episode_id == episode_id)
    result = await db.execute(stmt.execution_options(synchronize_session=False))
    await db.flush()
    return result.rowcount  # type: ignore[return-value]


async def cleanup_progress(db: AsyncSession, user_id: str) -> int:
    """Remove not-started/completed noise for a user. Returns count deleted."""
    rows = await list_progress(db, user_id)
    ids = select_cleanup_ids(rows)
    if ids:
        await db.execute(
            delete(ProgressItem)
            .where(ProgressItem.user_id == user_id)
            .where(ProgressItem.id.in_(ids))
            .execution_options(synchronize_session=False)
        )
        await db.flush()
    logger.info("progress_cleaned_up", user_id=user_id, deleted=len(ids))
    return len(ids)


async def import_progress(
    db: AsyncSession,
    user_id: str,
    items: list[ProgressInput],
) -> list[ProgressItem]:
    """
    Merge an imported progress set into the user's rows.

    Existing rows only move forward: a matching candidate replaces a row only
    when its ``watched`` is strictly greater. Candidates with no existing row
    are inserted without the save filter. Rows without a candidate are left
    alone. Returns the rows that were written.

    Raises:
        InternalError: If the store rejects a write.
    """
    existing = {(r.tmdb_id, r.season_id, r.episode_id): r for r in await list_progress(db, user_id)}
    written: list[ProgressItem] = []

    try:
        for item in items:
            tmdb_id = item.tmdb_id or str(uuid.uuid4())
            values = _row_values(user_id, tmdb_id, item)
            current = existing.get((tmdb_id, values["season_id"], values["episode_id"]))
            if current is not None and current.watched >= item.watched:
                continue

            result = await db.execute(_upsert_statement(db, values, monotonic=True))
            row = result.scalar_one_or_none()
            if row is not None:
                existing[(row.tmdb_id, row.season_id, row.episode_id)] = row
                written.append(row)
        await db.flush()
    except SQLAlchemyError as e:
        logger.exception("progress_import_failed", user_id=user_id)
        msg = "Failed to import progress"
        raise InternalError(msg) from e

    logger.info(
        "progress_imported",
        user_id=user_id,
        submitted=len(items),
        written=len(written),
        at=datetime.now(timezone.utc).isoformat(),
    )
    return written
