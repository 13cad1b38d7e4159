"""Test fixtures — a fresh app and database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test builds its own app with create_app(Settings(...)): an
   in-memory SQLite database (sqlite+aiosqlite:// with a StaticPool, so
   every session sees the same data), a random JWT secret, and
   bcrypt_rounds=4 so hashing is fast.
2. Tables are created from the ORM metadata before the test and the
   engine is disposed after — nothing leaks between tests.
3. The HTTP client talks to the app in-process through ASGITransport.

Nothing is overridden: every API test runs the real auth guard.
"""

import secrets

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from keepmark.config import Settings
from keepmark.db.models import Base
from keepmark.main import create_app


@pytest_asyncio.fixture()
async def settings():
    return Settings(
        database_url="sqlite+aiosqlite://",
        jwt_secret=secrets.token_urlsafe(32),
        bcrypt_rounds=4,
        environment="test",
    )


@pytest_asyncio.fixture()
async def app(settings):
    app = create_app(settings)
    async with app.state.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield app
    finally:
        await app.state.engine.dispose()


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client for the full app, auth guard included."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def db_session(app):
    """A session on the test database, for service-level tests."""
    async with app.state.session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def issuer(app):
    return app.state.token_issuer


# ─── Auth helpers ────────────────────────────────────────


async def signup(client: AsyncClient, email: str, password: str = "pw1") -> str:
    """Register a user through the API and return its access token."""
    r = await client.post("/auth/signup", json={"email": email, "password": password})
    assert r.status_code == 201, r.text
    return r.json()["access_token"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture()
async def alice(client):
    """Auth headers for alice@test.io."""
    return bearer(await signup(client, "alice@test.io", "pw1"))


@pytest_asyncio.fixture()
async def bob(client):
    """Auth headers for bob@test.io."""
    return bearer(await signup(client, "bob@test.io", "pw2"))
