"""Service test fixtures - async DB, fake oracle client, signed cookies, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database (partial unique index included)
    - get_db and get_llm_client overridden through app.dependency_overrides
    - db_manager patched so the readiness probe hits the test engine
    - A team "T1" exists in every test database

Design Decisions:
    - SQLite in-memory: fast, no external dependency; the active-session
      partial index is declared for sqlite too, so the constraint is exercised
    - Cookies are signed (tests/services/auth_cookies.py) with the same secrets the app reads from the environment
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

import teaminsight.infrastructure.database as db_module
from teaminsight.db.base import Base
from teaminsight.infrastructure.anthropic_client import get_llm_client
from teaminsight.infrastructure.database import get_db, DatabaseSessionManager
from teaminsight.main import app
from teaminsight.models.team import Team

from tests.services.auth_cookies import make_lecturer_cookie, make_team_cookie
from tests.services.fake_llm import FakeLLMClient

TEAM_ID = "T1"


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def seed_team(test_session_factory):
    async with test_session_factory() as db:
        team = Team(team_id=TEAM_ID, project_name="Smart Campus")
        db.add(team)
        await db.commit()
    return TEAM_ID


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
async def client(test_engine, test_session_factory, fake_llm):
    """FastAPI test client with DB and oracle dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm_client] = lambda: fake_llm

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def team_client(client, seed_team):
    """Test client carrying a valid team session cookie for T1."""
    client.cookies.set("team_session", make_team_cookie(seed_team))
    return client


@pytest.fixture
async def lecturer_client(client):
    client.cookies.set("lecturer_session", make_lecturer_cookie())
    return client
