"""Request/response schemas for authentication endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from mwb.db.models import Session, User
from mwb.schemas import CamelModel


# ---------------------------------------------------------------------------
# Shared shapes
# ---------------------------------------------------------------------------


class ProfileSchema(CamelModel):
    """Avatar icon plus two accent colors."""

    icon: str
    color_a: str
    color_b: str


class UserResponse(CamelModel):
    """Public view of a user."""

    id: str
    public_key: str
    namespace: str
    nickname: str
    profile: dict[str, Any]
    permissions: list[str]


class SessionResponse(CamelModel):
    """Public view of a session."""

    id: str
    user: str
    created_at: datetime
    accessed_at: datetime
    expires_at: datetime
    device: str
    user_agent: str


class SignedChallenge(CamelModel):
    """A challenge code and the client's signature over it."""

    code: str
    signature: str


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class RegisterStartRequest(CamelModel):
    captcha_token: str | None = None


class RegisterCompleteRequest(CamelModel):
    public_key: str
    challenge: SignedChallenge
    namespace: str = Field(..., min_length=1)
    device: str = Field(..., min_length=1, max_length=500)
    profile: ProfileSchema


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


class LoginStartRequest(CamelModel):
    public_key: str


class LoginCompleteRequest(CamelModel):
    public_key: str
    challenge: SignedChallenge
    device: str = Field(..., min_length=1, max_length=500)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ChallengeResponse(CamelModel):
    challenge: str


class AuthResponse(CamelModel):
    """Returned by both register and login completion."""

    user: UserResponse
    session: SessionResponse
    token: str


class CurrentUserResponse(CamelModel):
    user: UserResponse
    session: SessionResponse


def user_response(user: User) -> UserResponse:
    """Build a UserResponse from a User model."""
    return UserResponse(
        id=user.id,
        public_key=user.public_key,
        namespace=user.namespace,
        nickname=user.nickname,
        profile=user.profile or {},
        permissions=user.permissions or [],
    )


def session_response(session: Session) -> SessionResponse:
    """Build a SessionResponse from a Session model."""
    return SessionResponse(
        id=session.id,
        user=session.user_id,
        created_at=session.created_at,
        accessed_at=session.accessed_at,
        expires_at=session.expires_at,
        device=session.device,
        user_agent=session.user_agent,
    )
