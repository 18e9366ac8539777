"""Shared test fixtures.

Every test gets a fresh SQLite database file with the schema created from the
ORM metadata. Redis is left uninitialized, so the rate limiter passes requests
through unless a test patches it in.
"""

from __future__ import annotations

import base64
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
import pytest_asyncio
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from mwb.config import get_settings
from mwb.database import close_db, get_session_factory, init_db
from mwb.main import create_app


def b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


class KeyPair:
    """An Ed25519 key pair standing in for a client's mnemonic-derived key."""

    def __init__(self) -> None:
        self._private = Ed25519PrivateKey.generate()
        self.public_key = b64url(self._private.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw))

    def sign(self, message: str) -> str:
        return b64url(self._private.sign(message.encode("utf-8")))


@pytest.fixture
def keypair() -> KeyPair:
    return KeyPair()


@pytest.fixture
def make_keypair() -> Callable[[], KeyPair]:
    return KeyPair


@pytest_asyncio.fixture
async def client(tmp_path, monkeypatch) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against a fresh app and database."""
    monkeypatch.setenv("MWB_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("MWB_REDIS_URL", "")
    monkeypatch.setenv("MWB_CAPTCHA_SECRET", "")
    monkeypatch.setenv("MWB_SESSION_SECRET", "test-session-secret-0123456789abcdef")
    monkeypatch.setenv("MWB_LOG_FORMAT", "console")
    get_settings.cache_clear()
    settings = get_settings()

    app = create_app()
    await init_db(settings.database_url, create_tables=True)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await close_db()
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def db_session(client: AsyncClient) -> AsyncGenerator[AsyncSession, None]:
    """A direct database session on the same database the client uses."""
    async with get_session_factory()() as session:
        yield session


RegisterFn = Callable[..., Awaitable[dict[str, Any]]]


@pytest.fixture
def register(client: AsyncClient) -> RegisterFn:
    """Register a user through the HTTP flow. Returns the response body plus the key pair."""

    async def _register(keys: KeyPair | None = None, device: str = "pytest") -> dict[str, Any]:
        keys = keys or KeyPair()
        start = await client.post("/auth/register/start", json={})
        assert start.status_code == 200, start.text
        code = start.json()["challenge"]
        response = await client.post("/auth/register/complete", json={
            "publicKey": keys.public_key,
            "challenge": {"code": code, "signature": keys.sign(code)},
            "namespace": "movie-web",
            "device": device,
            "profile": {"icon": "bookmark", "colorA": "#2E65CF", "colorB": "#2E65CF"},
        })
        assert response.status_code == 200, response.text
        data = response.json()
        data["keys"] = keys
        return data

    return _register


@pytest_asyncio.fixture
async def user(register: RegisterFn) -> dict[str, Any]:
    """A registered user: ``{"user", "session", "token", "keys"}``."""
    return await register()


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient, user: dict[str, Any]) -> AsyncClient:
    """Client carrying the registered user's bearer token."""
    client.headers["Authorization"] = f"Bearer {user['token']}"
    return client
