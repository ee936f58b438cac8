"""Shared test fixtures.

API tests drive the FastAPI app in-process through ``httpx.ASGITransport``
against a throwaway SQLite database and upload directory, so no Postgres or
OAuth provider is needed.
"""

from __future__ import annotations

import uuid

import httpx
import pytest

from portal.auth import create_session_token
from portal.main import app
from shared.config import get_settings
from shared.database import dispose_engine, get_engine, get_session_factory
from shared.models import Base, User

BASE_URL = "http://testserver"


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


@pytest.fixture
async def portal_env(tmp_path, monkeypatch):
    """Point settings at a temp database and upload dir, and create the schema."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'retrodesk.db'}")
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("SESSION_SECRET", "test-session-secret")
    monkeypatch.setenv("MAX_UPLOAD_BYTES", str(1024 * 1024))
    get_settings.cache_clear()
    await dispose_engine()

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield get_settings()

    await dispose_engine()
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Users and clients
# ---------------------------------------------------------------------------


@pytest.fixture
def make_user(portal_env):
    """Factory that stores a User and returns it with a session token."""

    async def _make(first_name: str = "Ada", email: str | None = None) -> tuple[User, str]:
        user = User(
            auth_provider="google",
            provider_user_id=uuid.uuid4().hex,
            email=email or f"{first_name.lower()}@example.com",
            first_name=first_name,
        )
        async with get_session_factory()() as session:
            session.add(user)
            await session.commit()
        return user, create_session_token(user)

    return _make


@pytest.fixture
def make_client(portal_env):
    """Factory for in-process clients, optionally carrying a session cookie."""

    def _make(token: str | None = None) -> httpx.AsyncClient:
        cookies = {portal_env.session_cookie_name: token} if token else None
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url=BASE_URL,
            cookies=cookies,
        )

    return _make


@pytest.fixture
async def user_and_token(make_user):
    return await make_user()


@pytest.fixture
async def client(make_client, user_and_token):
    """Client authenticated as the default test user."""
    _, token = user_and_token
    async with make_client(token) as c:
        yield c


@pytest.fixture
async def anon_client(make_client):
    async with make_client() as c:
        yield c


@pytest.fixture
def upload():
    """Upload ``(filename, data)`` pairs and return the created records."""

    async def _upload(client: httpx.AsyncClient, *files: tuple[str, bytes]) -> list[dict]:
        resp = await client.post(
            "/api/files/upload",
            files=[("files", (name, data)) for name, data in files],
        )
        assert resp.status_code == 200, resp.text
        return resp.json()["files"]

    return _upload
