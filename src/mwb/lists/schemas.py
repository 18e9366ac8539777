"""Request/response schemas for list endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from mwb.db.models import UserList
from mwb.schemas import CamelModel


class ListItemInput(CamelModel):
    tmdb_id: str
    type: Literal["movie", "tv"]


class CreateListRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=255)
    public: bool = False
    items: list[ListItemInput] = []


class UpdateListRequest(CamelModel):
    """Partial update. ``description: null`` clears it; omitting it keeps it."""

    list_id: str
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=255)
    public: bool | None = None
    add_items: list[ListItemInput] = []
    remove_items: list[ListItemInput] = []


class ListItemResponse(CamelModel):
    id: str
    tmdb_id: str
    type: str
    added_at: datetime


class ListResponse(CamelModel):
    id: str
    user_id: str
    name: str
    description: str | None
    public: bool
    created_at: datetime
    list_items: list[ListItemResponse]


class ListsResponse(CamelModel):
    lists: list[ListResponse]


class ListMutationResponse(CamelModel):
    list: ListResponse
    message: str


class ListDeletedResponse(CamelModel):
    id: str
    message: str = "List deleted successfully"


def list_response(user_list: UserList) -> ListResponse:
    return ListResponse(
        id=user_list.id,
        user_id=user_list.user_id,
        name=user_list.name,
        description=user_list.description,
        public=user_list.public,
        created_at=user_list.created_at,
        list_items=[
            ListItemResponse(id=i.id, tmdb_id=i.tmdb_id, type=i.type, added_at=i.added_at)
            for i in user_list.items
        ],
    )
