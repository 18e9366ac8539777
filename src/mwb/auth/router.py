"""Authentication router: all /auth/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from mwb.auth.captcha import verify_captcha_token
from mwb.auth.schemas import (
    AuthResponse,
    ChallengeResponse,
    LoginCompleteRequest,
    LoginStartRequest,
    RegisterCompleteRequest,
    RegisterStartRequest,
    session_response,
    user_response,
)
from mwb.auth.service import (
    AuthResult,
    complete_login,
    complete_registration,
    start_login,
    start_registration,
)
from mwb.config import get_settings
from mwb.database import get_session
from mwb.errors import ValidationError

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        user=user_response(result.user),
        session=session_response(result.session),
        token=result.token,
    )


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


@router.post("/register/start", response_model=ChallengeResponse)
async def register_start(
    body: RegisterStartRequest,
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> ChallengeResponse:
    """Request a registration challenge."""
    settings = get_settings()
    if settings.captcha_enabled:
        if not body.captcha_token:
            msg = "Captcha token is required"
            raise ValidationError(msg)
        remote_ip = request.client.host if request.client else None
        if not await verify_captcha_token(body.captcha_token, remote_ip):
            msg = "Captcha verification failed"
            raise ValidationError(msg)

    challenge = await start_registration(db)
    await db.commit()
    return ChallengeResponse(challenge=challenge.code)


@router.post("/register/complete", response_model=AuthResponse)
async def register_complete(
    body: RegisterCompleteRequest,
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> AuthResponse:
    """Verify the signed registration challenge and create the account."""
    result = await complete_registration(
        db,
        public_key=body.public_key,
        code=body.challenge.code,
        signature=body.challenge.signature,
        namespace=body.namespace,
        device=body.device,
        user_agent=request.headers.get("user-agent", ""),
        profile=body.profile.model_dump(by_alias=True),
    )
    await db.commit()
    return _auth_response(result)


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


@router.post("/login/start", response_model=ChallengeResponse)
async def login_start(
    body: LoginStartRequest,
    db: AsyncSession = Depends(get_session),
) -> ChallengeResponse:
    """Request a login challenge for a registered public key."""
    challenge = await start_login(db, body.public_key)
    await db.commit()
    return ChallengeResponse(challenge=challenge.code)


@router.post("/login/complete", response_model=AuthResponse)
async def login_complete(
    body: LoginCompleteRequest,
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> AuthResponse:
    """Verify the signed login challenge and open a session."""
    result = await complete_login(
        db,
        public_key=body.public_key,
        code=body.challenge.code,
        signature=body.challenge.signature,
        device=body.device,
        user_agent=request.headers.get("user-agent", ""),
    )
    await db.commit()
    return _auth_response(result)
