"""
Test infrastructure for the Article Management API.

Strategy
--------
- SQLite in-memory via aiosqlite removes the need for a running Postgres
  instance, keeping the suite fast and self-contained.
- StaticPool forces every session to share the one in-memory connection;
  SQLite in-memory databases are connection-scoped, so a second
  connection would see an empty database.
- Each test gets its own ``Database`` handle with freshly created tables,
  injected through ``create_app(database=...)``; nothing is shared
  between tests.
- bcrypt rounds are lowered through the environment *before* the app is
  imported so password hashing does not dominate the run time.
"""
import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Database  # noqa: E402
from app.main import create_app  # noqa: E402
from app.models import User  # noqa: E402
from app.schemas import CurrentUser  # noqa: E402
from app.security import hash_password  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ---------------------------------------------------------------------------
# Database / app
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def database() -> Database:
    """Fresh in-memory database with all tables created."""
    db = Database(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncSession:
    """
    Live AsyncSession for service- and repository-level tests.

    Committed on exit like a request-scoped session would be.
    """
    async with database.session() as session:
        yield session


@pytest_asyncio.fixture
async def async_client(database: Database) -> AsyncClient:
    """httpx client wired to an app built around the test database."""
    app = create_app(database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ---------------------------------------------------------------------------
# Helpers shared by the HTTP tests
# ---------------------------------------------------------------------------

async def register(client: AsyncClient, username: str, password: str = "secret1", email: str | None = None) -> dict:
    """Register *username* and return the response ``data`` (user + token)."""
    resp = await client.post("/auth/register", json={
        "username": username,
        "email": email or f"{username}@example.com",
        "password": password,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def alice(async_client: AsyncClient) -> dict:
    """Registered user ``alice``: ``{"user": {...}, "token": "...", "headers": {...}}``."""
    data = await register(async_client, "alice", email="alice@example.com")
    data["headers"] = auth_headers(data["token"])
    return data


@pytest_asyncio.fixture
async def bob(async_client: AsyncClient) -> dict:
    data = await register(async_client, "bob", email="bob@example.com")
    data["headers"] = auth_headers(data["token"])
    return data


async def make_user(db: AsyncSession, username: str = "svcuser") -> CurrentUser:
    """Insert a user directly and return the identity the gate would resolve."""
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash=hash_password("secret1"),
    )
    db.add(user)
    await db.flush()
    return CurrentUser(id=user.id, username=user.username)
