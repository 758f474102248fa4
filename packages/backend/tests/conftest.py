"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test builds its own app via create_app() with SQLite in memory
   (aiosqlite + StaticPool, so every session shares one connection and
   sees the same schema), and creates the tables up front.
2. Service tests talk to a session from that app's session factory.
3. API tests talk to the app through httpx's ASGITransport — no server,
   no real network. The lifespan doesn't run, so Redis is never touched
   and rate limiting is skipped.

bcrypt runs at its minimum cost (4) to keep the suite fast.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from stormtask.config import Settings
from stormtask.db.engine import init_schema
from stormtask.main import create_app

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
TEST_BCRYPT_COST = 4


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        database_url=TEST_DB_URL,
        jwt_secret="test-secret-not-for-production",
        bcrypt_cost=TEST_BCRYPT_COST,
        environment="test",
    )


@pytest_asyncio.fixture()
async def app(test_settings):
    app = create_app(test_settings)
    await init_schema(app.state.engine)
    try:
        yield app
    finally:
        await app.state.engine.dispose()


@pytest_asyncio.fixture()
async def db_session(app):
    """Session for service-level tests. Don't mix with `client` in one test."""
    async with app.state.session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ─── API helpers ────────────────────────────────────────


async def register(client, email: str, name: str = "User", password: str = "password_123") -> dict:
    r = await client.post(
        "/api/v1/user",
        json={"email": email, "name": name, "password": password},
    )
    assert r.status_code == 200, r.text
    return r.json()


async def login(client, email: str, password: str = "password_123") -> dict:
    """Authenticate and return Bearer headers.

    The cookie jar is cleared so tests juggling several users always act
    as whoever's headers they pass.
    """
    r = await client.post(
        "/api/v1/authenticate",
        json={"email": email, "password": password},
    )
    assert r.status_code == 200, r.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {r.json()['token']}"}


async def register_and_login(client, email: str, name: str = "User") -> dict:
    await register(client, email, name)
    return await login(client, email)
