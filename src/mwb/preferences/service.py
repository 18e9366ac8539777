"""Per-user settings document storage."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from mwb.db.models import UserSettings
from mwb.db.upsert import insert_for

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


async def get_settings_document(db: AsyncSession, user_id: str) -> dict[str, Any]:
    """Stored settings, or an empty dict when the user never saved any."""
    result = await db.execute(select(UserSettings.settings).where(UserSettings.user_id == user_id))
    return dict(result.scalar_one_or_none() or {})


async def save_settings_document(db: AsyncSession, user_id: str, settings: dict[str, Any]) -> None:
    """Replace the user's settings document."""
    stmt = insert_for(db, UserSettings).values(
        user_id=user_id,
        settings=settings,
        updated_at=datetime.now(timezone.utc),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id"],
        set_={"settings": stmt.excluded.settings, "updated_at": stmt.excluded.updated_at},
    )
    await db.execute(stmt)
    await db.flush()
