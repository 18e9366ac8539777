"""
One-time challenge codes.

A client asks for a code, signs it with the private key behind its public
key, and sends back the signature. Each code is scoped to a flow
(``registration``/``login``) and an auth type (``mnemonic``), expires after
``challenge_expire_seconds`` and can be consumed at most once.
"""

from __future__ import annotations

import secrets
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Literal

import structlog
from sqlalchemy import delete, or_, select, update

from mwb.auth.signature import verify_challenge_signature
from mwb.config import get_settings
from mwb.db.models import ChallengeCode
from mwb.errors import (
    ChallengeAlreadyUsed,
    ChallengeExpired,
    ChallengeNotFound,
    ChallengeScopeMismatch,
    SignatureInvalid,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

ChallengeFlow = Literal["registration", "login"]
AuthType = Literal["mnemonic"]
SignatureVerifier = Callable[[str, str, str], bool]


async def create_challenge_code(
    db: AsyncSession,
    flow: ChallengeFlow,
    auth_type: AuthType,
) -> ChallengeCode:
    """Issue and persist a fresh challenge code."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    challenge = ChallengeCode(
        code=secrets.token_urlsafe(32),
        flow=flow,
        auth_type=auth_type,
        created_at=now,
        expires_at=now + timedelta(seconds=settings.challenge_expire_seconds),
    )
    db.add(challenge)
    await db.flush()
    return challenge


async def verify_challenge_code(
    db: AsyncSession,
    code: str,
    public_key: str,
    signature: str,
    flow: ChallengeFlow,
    auth_type: AuthType,
    *,
    verifier: SignatureVerifier = verify_challenge_signature,
) -> None:
    """
    Verify a signed challenge and consume it.

    The code is consumed with a single conditional UPDATE and committed
    immediately, so a replay fails even if the caller's request later aborts.
    A bad signature leaves the code unconsumed; expiry still bounds retries.

    Raises:
        ChallengeNotFound, ChallengeExpired, ChallengeScopeMismatch,
        ChallengeAlreadyUsed, SignatureInvalid.
    """
    result = await db.execute(select(ChallengeCode).where(ChallengeCode.code == code))
    challenge = result.scalar_one_or_none()
    now = datetime.now(timezone.utc)

    if challenge is None:
        logger.info("challenge_rejected", reason="not_found", flow=flow)
        raise ChallengeNotFound
    if challenge.expires_at <= now:
        logger.info("challenge_rejected", reason="expired", flow=flow)
        raise ChallengeExpired
    if challenge.flow != flow or challenge.auth_type != auth_type:
        logger.info(
            "challenge_rejected",
            reason="scope_mismatch",
            flow=flow,
            issued_flow=challenge.flow,
            auth_type=auth_type,
            issued_auth_type=challenge.auth_type,
        )
        raise ChallengeScopeMismatch
    if challenge.consumed_at is not None:
        logger.info("challenge_rejected", reason="already_used", flow=flow)
        raise ChallengeAlreadyUsed

    if not verifier(public_key, code, signature):
        logger.info("challenge_rejected", reason="bad_signature", flow=flow)
        raise SignatureInvalid

    consumed = await db.execute(
        update(ChallengeCode)
        .where(ChallengeCode.code == code)
        .where(ChallengeCode.consumed_at.is_(None))
        .values(consumed_at=now)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    if consumed.rowcount != 1:
        logger.info("challenge_rejected", reason="already_used", flow=flow)
        raise ChallengeAlreadyUsed

    logger.info("challenge_consumed", flow=flow, auth_type=auth_type)


async def sweep_expired_challenges(db: AsyncSession) -> int:
    """Delete expired and consumed challenge codes. Returns count deleted."""
    now = datetime.now(timezone.utc)
    result = await db.execute(
        delete(ChallengeCode).where(
            or_(ChallengeCode.expires_at <= now, ChallengeCode.consumed_at.is_not(None))
        )
        .execution_options(synchronize_session=False)
    )
    await db.flush()
    return result.rowcount  # type: ignore[return-value]
