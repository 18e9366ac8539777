"""List routers: owner endpoints under /users/{id}/lists and the public /lists/{list_id}."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mwb.auth.dependencies import OwnerRoute, get_owner_session
from mwb.database import get_session
from mwb.db.models import Session
from mwb.lists.schemas import (
    CreateListRequest,
    ListDeletedResponse,
    ListMutationResponse,
    ListResponse,
    ListsResponse,
    UpdateListRequest,
    list_response,
)
from mwb.lists.service import create_list, delete_list, get_public_list, list_user_lists, update_list

router = APIRouter(prefix="/users/{id}/lists", tags=["Lists"], route_class=OwnerRoute)
public_router = APIRouter(prefix="/lists", tags=["Lists"])


@router.get("", response_model=ListsResponse)
async def get_lists(
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> ListsResponse:
    return ListsResponse(lists=[list_response(x) for x in await list_user_lists(db, session.user_id)])


@router.post("", response_model=ListMutationResponse)
async def post_list(
    body: CreateListRequest,
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> ListMutationResponse:
    user_list = await create_list(db, session.user_id, body)
    await db.commit()
    return ListMutationResponse(list=list_response(user_list), message="List created successfully")


@router.patch("", response_model=ListMutationResponse)
async def patch_list(
    body: UpdateListRequest,
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> ListMutationResponse:
    user_list = await update_list(db, session.user_id, body)
    await db.commit()
    return ListMutationResponse(list=list_response(user_list), message="List updated successfully")


@router.delete("/{list_id}", response_model=ListDeletedResponse)
async def remove_list(
    list_id: str,
    session: Session = Depends(get_owner_session),
    db: AsyncSession = Depends(get_session),
) -> ListDeletedResponse:
    await delete_list(db, session.user_id, list_id)
    await db.commit()
    return ListDeletedResponse(id=list_id)


@public_router.get("/{list_id}", response_model=ListResponse)
async def get_shared_list(
    list_id: str,
    db: AsyncSession = Depends(get_session),
) -> ListResponse:
    """A public list. No session required."""
    return list_response(await get_public_list(db, list_id))
