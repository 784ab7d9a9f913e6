"""Pytest configuration and fixtures for engine and API tests."""
import os

# Set test env BEFORE any imports that use config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["INITIAL_ADMIN_USERNAME"] = "admin"
os.environ["INITIAL_ADMIN_EMAIL"] = "admin@example.com"
os.environ["INITIAL_ADMIN_PASSWORD"] = "TestPass123"

from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from nexus.models import Role, TournamentFormat, TournamentStatus, User, utcnow
from nexus.models.base import engine as default_engine
from nexus.models.base import drop_db, init_db, make_engine, make_session_factory
from nexus.permissions import Caller
from nexus.schemas import TournamentCreate
from nexus.services import tournaments as tournament_service
from nexus.store import Store
from web.api.main import app


def caller_for(user: User) -> Caller:
    return Caller(caller_id=user.id, role=user.role)


# --- Engine-level fixtures: a fresh in-memory store per test ---


@pytest.fixture
async def db_engine():
    engine = make_engine("sqlite+aiosqlite://")
    await init_db(engine)
    yield engine
    await drop_db(engine)
    await engine.dispose()


@pytest.fixture
async def store(db_engine):
    async with make_session_factory(db_engine)() as session:
        yield Store(session)


@pytest.fixture
def make_user(store):
    counter = {"n": 0}

    async def _make(role: Role = Role.PLAYER, username: str | None = None) -> Caller:
        counter["n"] += 1
        name = username or f"{role.value.lower()}{counter['n']}"
        user = User(username=name, email=f"{name}@example.com", password_hash="x", role=role)
        async with store.transaction():
            await store.add(user)
        return caller_for(user)

    return _make


@pytest.fixture
async def admin(make_user):
    return await make_user(Role.ADMIN, "root")


@pytest.fixture
async def organizer(make_user):
    return await make_user(Role.ORGANIZER, "orga")


@pytest.fixture
def make_tournament(store, organizer):
    """Create a tournament through the engine, left in DRAFT or opened."""

    async def _make(
        fmt: TournamentFormat = TournamentFormat.SOLO,
        max_participants: int = 8,
        status: TournamentStatus = TournamentStatus.OPEN,
        owner: Caller | None = None,
        **fields,
    ):
        owner = owner or organizer
        data = TournamentCreate(
            name=fields.pop("name", "Spring Cup"),
            game=fields.pop("game", "Rocket League"),
            format=fmt,
            max_participants=max_participants,
            start_date=fields.pop("start_date", utcnow() + timedelta(days=30)),
            **fields,
        )
        tournament = await tournament_service.create_tournament(store, data, owner)
        if status == TournamentStatus.OPEN:
            tournament = await tournament_service.change_tournament_status(
                store, tournament.id, TournamentStatus.OPEN, owner
            )
        return tournament

    return _make


# --- API fixtures: the app's own engine, reset per test ---


@pytest.fixture
async def api_db():
    """Tables exist for the test (ASGI lifespan doesn't run with httpx); dropped on dispose."""
    await init_db()
    yield
    await default_engine.dispose()


@pytest.fixture
async def client(api_db):
    """Async HTTP client for testing the API."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def auth_headers(client):
    """Login as the bootstrapped admin and return Authorization headers."""
    r = await client.post(
        "/api/auth/login",
        json={"email": "admin@example.com", "password": "TestPass123"},
    )
    assert r.status_code == 200, f"Login failed: {r.text}"
    token = r.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register_user(client):
    """Register an account through the API and return (user json, auth headers)."""

    async def _register(username: str, role: str = "PLAYER"):
        r = await client.post(
            "/api/auth/register",
            json={
                "username": username,
                "email": f"{username}@example.com",
                "password": "Secret123",
                "role": role,
            },
        )
        assert r.status_code == 200, r.text
        user = r.json()
        r = await client.post(
            "/api/auth/login",
            json={"email": f"{username}@example.com", "password": "Secret123"},
        )
        assert r.status_code == 200, r.text
        return user, {"Authorization": f"Bearer {r.json()['access_token']}"}

    return _register
