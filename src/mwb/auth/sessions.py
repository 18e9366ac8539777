"""
Session lifecycle and session tokens.

A session token is an HS256 JWT carrying the session id. The signature lets
us reject tampered or garbage tokens without touching the database; the
``sessions`` row stays the source of truth for expiry and revocation.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import jwt
import structlog
from sqlalchemy import delete, select

from mwb.config import get_settings
from mwb.db.models import Session
from mwb.errors import SessionExpired, SessionNotFound, Unauthenticated, ValidationError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

_ALGORITHM = "HS256"
DEVICE_MIN_LENGTH = 1
DEVICE_MAX_LENGTH = 500


async def make_session(
    db: AsyncSession,
    user_id: str,
    device: str,
    user_agent: str,
) -> Session:
    """
    Create and persist a session for ``user_id``.

    Raises:
        ValidationError: If the device label is empty or longer than 500 characters.
    """
    if not DEVICE_MIN_LENGTH <= len(device) <= DEVICE_MAX_LENGTH:
        msg = "Device must be between 1 and 500 characters"
        raise ValidationError(msg)

    settings = get_settings()
    now = datetime.now(timezone.utc)
    session = Session(
        user_id=user_id,
        device=device,
        user_agent=user_agent,
        created_at=now,
        accessed_at=now,
        expires_at=now + timedelta(days=settings.session_ttl_days),
    )
    db.add(session)
    await db.flush()
    logger.info("session_created", session_id=session.id, user_id=user_id)
    return session


def make_session_token(session: Session) -> str:
    """Mint the bearer token for a session."""
    settings = get_settings()
    payload: dict[str, Any] = {
        "sid": session.id,
        "iss": settings.session_issuer,
        "iat": datetime.now(timezone.utc),
    }
    return jwt.encode(payload, settings.session_secret, algorithm=_ALGORITHM)


def session_id_from_token(token: str) -> str:
    """
    Validate token integrity and return the session id it carries.

    Raises:
        Unauthenticated: If the token is malformed, tampered with, or lacks a session id.
    """
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.session_secret,
            algorithms=[_ALGORITHM],
            issuer=settings.session_issuer,
        )
    except jwt.InvalidTokenError as e:
        msg = "Invalid session token"
        raise Unauthenticated(msg) from e

    sid = payload.get("sid")
    if not isinstance(sid, str) or not sid:
        msg = "Invalid session token"
        raise Unauthenticated(msg)
    return sid


async def get_session_by_id(db: AsyncSession, session_id: str) -> Session | None:
    """Fetch a session row by id."""
    result = await db.execute(select(Session).where(Session.id == session_id))
    return result.scalar_one_or_none()


async def get_current_session(db: AsyncSession, token: str) -> Session:
    """
    Resolve a bearer token to a live session and record the access.

    Raises:
        Unauthenticated: Malformed or tampered token.
        SessionNotFound: No such session (logged out or deleted).
        SessionExpired: Session is past its expiry.
    """
    sid = session_id_from_token(token)
    session = await get_session_by_id(db, sid)
    if session is None:
        raise SessionNotFound

    now = datetime.now(timezone.utc)
    if session.expires_at <= now:
        logger.info("session_expired", session_id=sid, user_id=session.user_id)
        raise SessionExpired

    session.accessed_at = now
    await db.flush()
    return session


async def list_sessions(db: AsyncSession, user_id: str) -> list[Session]:
    """All sessions for a user, newest first."""
    result = await db.execute(
        select(Session).where(Session.user_id == user_id).order_by(Session.created_at.desc())
    )
    return list(result.scalars().all())


async def delete_session(db: AsyncSession, session_id: str) -> bool:
    """Delete a session (logout). Returns True if a row was removed."""
    result = await db.execute(delete(Session).where(Session.id == session_id))
    await db.flush()
    return bool(result.rowcount)


async def sweep_expired_sessions(db: AsyncSession) -> int:
    """Delete every expired session. Returns count deleted."""
    result = await db.execute(
        delete(Session)
        .where(Session.expires_at <= datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    await db.flush()
    return result.rowcount  # type: ignore[return-value]
