"""Pytest configuration and fixtures for service and API tests."""
import os

# Set test env BEFORE any imports that use config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["INITIAL_ADMIN_PASSWORD"] = "testpass123"
os.environ["INITIAL_ADMIN_EMAIL"] = "admin@teamhub.local"
os.environ["NOTIFY_WEBHOOK_URL"] = ""
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from httpx import ASGITransport, AsyncClient

from teamhub.models import Base, User
from teamhub.models.base import async_session_factory, engine
from web.api.main import app
from web.auth import create_access_token, hash_password


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
async def _init_db():
    """Fresh tables for every test (ASGI lifespan doesn't run with httpx)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    # In-memory database lives on the pooled connection; drop it with the test's event loop
    await engine.dispose()


@pytest.fixture
async def session():
    async with async_session_factory() as s:
        yield s


@pytest.fixture
async def client():
    """Async HTTP client for testing the API."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def make_user():
    """Factory: insert a user with the given role and return it."""

    async def _make(email: str, role: str = "player", first_name: str = "", last_name: str = "") -> User:
        async with async_session_factory() as s:
            user = User(
                email=email,
                password_hash=hash_password("secret123"),
                role=role,
                first_name=first_name,
                last_name=last_name,
            )
            s.add(user)
            await s.commit()
            await s.refresh(user)
            return user

    return _make


def headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
async def manager(make_user):
    return await make_user("coach@example.com", "manager", "Casey", "Coach")


@pytest.fixture
async def player(make_user):
    return await make_user("alice@example.com", "player", "Alice", "Smith")


@pytest.fixture
async def organizer(make_user):
    return await make_user("org@example.com", "organizer", "Olive", "Organizer")


@pytest.fixture
def manager_headers(manager):
    return headers_for(manager)


@pytest.fixture
def player_headers(player):
    return headers_for(player)


@pytest.fixture
def organizer_headers(organizer):
    return headers_for(organizer)


@pytest.fixture
async def auth_headers(client):
    """Login as the bootstrap admin and return Authorization headers."""
    r = await client.post(
        "/api/auth/login",
        json={"email": "admin@teamhub.local", "password": "testpass123"},
    )
    assert r.status_code == 200, f"Login failed: {r.text}"
    token = r.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def extra_players(make_user):
    """Three more registered players: Bob, Cara and Dev."""
    return [
        await make_user("bob@example.com", "player", "Bob", "Jones"),
        await make_user("cara@example.com", "player", "Cara", "Lee"),
        await make_user("dev@example.com", "player", "Dev", "Patel"),
    ]
