"""Settings router: /users/{id}/settings endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mwb.auth.dependencies import OwnerRoute, get_owner_session
from mwb.database import get_session
from mwb.db.models import Session
from mwb.preferences.schemas import SettingsSavedResponse, UserSettingsResponse, UserSettingsSchema
from mwb.preferences.service import get_settings_document, save_settings_document
from mwb.users.service import require_user

router = APIRouter(prefix="/users/{id}/settings", tags=["Settings"], route_class=OwnerRoute)


@router.get("", response_model=UserSettingsResponse)
async def get_user_settings(
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> UserSettingsResponse:
    """Stored settings merged over defaults."""
    await require_user(db, session.user_id)
    stored = await get_settings_document(db, session.user_id)
    return UserSettingsResponse(id=session.user_id, **UserSettingsSchema.model_validate(stored).model_dump())


@router.put("", response_model=SettingsSavedResponse)
async def put_user_settings(
    body: UserSettingsSchema,
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> SettingsSavedResponse:
    await require_user(db, session.user_id)
    await save_settings_document(db, session.user_id, body.model_dump())
    await db.commit()
    return SettingsSavedResponse()
