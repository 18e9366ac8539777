"""
Authentication business logic.

Registration and login both run the same two-step protocol: the client asks
for a challenge, signs it with its mnemonic-derived key, and completes with
the signature. Completion always verifies the challenge before disclosing
whether the public key is known.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select

from mwb.auth.challenge import SignatureVerifier, create_challenge_code, verify_challenge_code
from mwb.auth.nickname import generate_random_nickname
from mwb.auth.sessions import make_session, make_session_token
from mwb.auth.signature import verify_challenge_signature
from mwb.db.models import ChallengeCode, Session, User
from mwb.errors import Conflict, UserNotFound

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

AUTH_TYPE = "mnemonic"


@dataclass
class AuthResult:
    """A signed-in user with a fresh session and its token."""

    user: User
    session: Session
    token: str


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_public_key(db: AsyncSession, public_key: str) -> User | None:
    """Fetch a user by public key."""
    result = await db.execute(select(User).where(User.public_key == public_key))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


async def start_registration(db: AsyncSession) -> ChallengeCode:
    """Issue a registration challenge."""
    return await create_challenge_code(db, "registration", AUTH_TYPE)


async def complete_registration(
    db: AsyncSession,
    *,
    public_key: str,
    code: str,
    signature: str,
    namespace: str,
    device: str,
    user_agent: str,
    profile: dict[str, Any],
    verifier: SignatureVerifier = verify_challenge_signature,
) -> AuthResult:
    """
    Verify the registration challenge and create the user plus a session.

    Raises:
        ChallengeInvalid: If the challenge or signature does not check out.
        Conflict: If a user already owns this public key.
    """
    await verify_challenge_code(
        db, code, public_key, signature, "registration", AUTH_TYPE, verifier=verifier
    )

    if await get_user_by_public_key(db, public_key) is not None:
        msg = "A user with this public key already exists"
        raise Conflict(msg)

    now = datetime.now(timezone.utc)
    user = User(
        public_key=public_key,
        namespace=namespace,
        nickname=generate_random_nickname(),
        profile=profile,
        permissions=[],
        ratings=[],
        created_at=now,
        last_logged_in=now,
    )
    db.add(user)
    await db.flush()
    logger.info("user_created", user_id=user.id, namespace=namespace)

    session = await make_session(db, user.id, device, user_agent)
    return AuthResult(user=user, session=session, token=make_session_token(session))


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


async def start_login(db: AsyncSession, public_key: str) -> ChallengeCode:
    """
    Issue a login challenge for a known public key.

    Raises:
        UserNotFound: If no user owns the key.
    """
    if await get_user_by_public_key(db, public_key) is None:
        raise UserNotFound
    return await create_challenge_code(db, "login", AUTH_TYPE)


async def complete_login(
    db: AsyncSession,
    *,
    public_key: str,
    code: str,
    signature: str,
    device: str,
    user_agent: str,
    verifier: SignatureVerifier = verify_challenge_signature,
) -> AuthResult:
    """
    Verify the login challenge and open a new session.

    Raises:
        ChallengeInvalid: If the challenge or signature does not check out.
        UserNotFound: If no user owns the key.
    """
    await verify_challenge_code(db, code, public_key, signature, "login", AUTH_TYPE, verifier=verifier)

    user = await get_user_by_public_key(db, public_key)
    if user is None:
        raise UserNotFound

    user.last_logged_in = datetime.now(timezone.utc)
    await db.flush()
    logger.info("user_logged_in", user_id=user.id)

    session = await make_session(db, user.id, device, user_agent)
    return AuthResult(user=user, session=session, token=make_session_token(session))
