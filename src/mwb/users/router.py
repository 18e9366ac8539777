"""User router: /users/@me, /users/{id}/... and /sessions endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mwb.auth.dependencies import OwnerRoute, get_current_session, get_owner_session
from mwb.auth.schemas import CurrentUserResponse, UserResponse, session_response, user_response
from mwb.auth.sessions import delete_session, get_session_by_id, list_sessions
from mwb.database import get_session
from mwb.db.models import Session
from mwb.errors import Forbidden, NotFound
from mwb.users.schemas import (
    DeleteAccountResponse,
    DeleteSessionResponse,
    GroupOrderResponse,
    RatingInput,
    RatingResponse,
    RatingsResponse,
    SessionListItem,
    UpdateUserRequest,
    session_list_item,
)
from mwb.users.service import (
    delete_account,
    get_group_order,
    get_ratings,
    put_group_order,
    require_user,
    update_user,
    upsert_rating,
)

router = APIRouter(tags=["Users"], route_class=OwnerRoute)


@router.get("/users/@me", response_model=CurrentUserResponse)
async def get_me(
    session: Session = Depends(get_current_session),
    db: AsyncSession = Depends(get_session),
) -> CurrentUserResponse:
    """The signed-in user and the session used for this request."""
    user = await require_user(db, session.user_id)
    return CurrentUserResponse(user=user_response(user), session=session_response(session))


@router.patch("/users/{id}", response_model=UserResponse)
async def patch_user(
    body: UpdateUserRequest,
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> UserResponse:
    user = await update_user(
        db,
        session.user_id,
        profile=body.profile.model_dump(by_alias=True) if body.profile else None,
        nickname=body.nickname,
    )
    await db.commit()
    return user_response(user)


@router.delete("/users/{id}", response_model=DeleteAccountResponse)
async def delete_user(
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> DeleteAccountResponse:
    """Delete the account and all owned data. Safe to retry after a partial failure."""
    await delete_account(db, session.user_id)
    return DeleteAccountResponse()


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


@router.get("/users/{id}/sessions", response_model=list[SessionListItem])
async def get_sessions(
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> list[SessionListItem]:
    return [session_list_item(s) for s in await list_sessions(db, session.user_id)]


@router.delete("/sessions/{sid}", response_model=DeleteSessionResponse)
async def revoke_session(
    sid: str,
    session: Session = Depends(get_current_session),
    db: AsyncSession = Depends(get_session),
) -> DeleteSessionResponse:
    """Log out: revoke the current session or another of the caller's sessions."""
    target = await get_session_by_id(db, sid)
    if target is None:
        msg = "Session not found"
        raise NotFound(msg)
    if target.user_id != session.user_id:
        raise Forbidden
    await delete_session(db, sid)
    await db.commit()
    return DeleteSessionResponse(id=sid)


# ---------------------------------------------------------------------------
# Ratings
# ---------------------------------------------------------------------------


@router.get("/users/{id}/ratings", response_model=RatingsResponse)
async def list_ratings(
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> RatingsResponse:
    ratings = await get_ratings(db, session.user_id)
    return RatingsResponse(user_id=session.user_id, ratings=ratings)


@router.post("/users/{id}/ratings", response_model=RatingResponse)
async def post_rating(
    body: RatingInput,
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> RatingResponse:
    rating = await upsert_rating(db, session.user_id, body.model_dump())
    await db.commit()
    return RatingResponse(user_id=session.user_id, rating=rating)


# ---------------------------------------------------------------------------
# Bookmark group order
# ---------------------------------------------------------------------------


@router.get("/users/{id}/group-order", response_model=GroupOrderResponse)
async def read_group_order(
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> GroupOrderResponse:
    return GroupOrderResponse(group_order=await get_group_order(db, session.user_id))


@router.put("/users/{id}/group-order", response_model=GroupOrderResponse)
async def write_group_order(
    body: list[str],
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> GroupOrderResponse:
    order = await put_group_order(db, session.user_id, body)
    await db.commit()
    return GroupOrderResponse(group_order=order)
