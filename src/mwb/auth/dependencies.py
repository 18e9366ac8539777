"""FastAPI authentication dependencies."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import Depends, Path, Request, Response, Security
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from mwb.auth.sessions import get_current_session as resolve_session
from mwb.database import get_session, get_session_factory
from mwb.db.models import Session
from mwb.errors import Forbidden, Unauthenticated

_bearer = HTTPBearer(auto_error=False)


async def _session_for(credentials: HTTPAuthorizationCredentials | None, db: AsyncSession) -> Session:
    if credentials is None:
        msg = "Missing session token"
        raise Unauthenticated(msg)
    session = await resolve_session(db, credentials.credentials)
    await db.commit()
    return session


async def get_current_session(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> Session:
    """
    Resolve the bearer token to a live session.

    A missing header is never treated as anonymous. The access timestamp is
    committed here so read-only routes record it too.
    """
    return await _session_for(credentials, db)


async def get_owner_session(
    id: str = Path(),  # noqa: A002
    session: Session = Depends(get_current_session),
) -> Session:
    """Same as get_current_session, but the path's ``{id}`` must be the session's user."""
    if session.user_id != id:
        raise Forbidden
    return session


class OwnerRoute(APIRoute):
    """
    Route class for ``/users/{id}/...`` endpoints.

    FastAPI decodes the JSON body before it resolves dependencies, so a
    malformed body would otherwise answer 400 to a caller who does not own
    the path. Here the session and ownership checks run first and only a
    caller who passes them sees the decode error.
    """

    def get_route_handler(self) -> Callable[[Request], Awaitable[Response]]:
        handler = super().get_route_handler()

        async def route_handler(request: Request) -> Response:
            try:
                return await handler(request)
            except RequestValidationError as exc:
                if "id" in request.path_params and any(e.get("type") == "json_invalid" for e in exc.errors()):
                    async with get_session_factory()() as db:
                        session = await _session_for(await _bearer(request), db)
                    if session.user_id != request.path_params["id"]:
                        raise Forbidden from exc
                raise

        return route_handler
