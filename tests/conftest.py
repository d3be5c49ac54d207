"""Shared test fixtures for Matchday API tests"""

import os
import tempfile
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from tests.factories import TODAY

# Set test environment before importing app
os.environ["MATCHDAY_DATABASE_PATH"] = os.path.join(tempfile.gettempdir(), "test_matchday.json")
os.environ["MATCHDAY_PUBLIC_BASE_URL"] = "https://matchday.test"


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest.fixture
def store(tmp_path):
    """Fresh TinyDB-backed store per test"""
    from matchday.services.database import Database
    from matchday.services.store import TeamStore

    team_store = TeamStore(Database(tmp_path / "db" / "matchday.json"))
    team_store.initialize()
    yield team_store
    team_store.close()


@pytest.fixture
def team(store):
    """A team of five with a threshold of three"""
    return store.create_team("FC Test", "Anna", ["Ben", "Clara", "David", "Eva"], 3)


@pytest.fixture
def members(store, team):
    return store.list_members(team["id"])


# =============================================================================
# Application and Client Fixtures
# =============================================================================

@pytest.fixture
def app(store):
    """FastAPI application wired to the per-test store and a fixed day"""
    from matchday.main import app as fastapi_app
    from matchday.routes.deps import get_store, get_today

    fastapi_app.dependency_overrides[get_store] = lambda: store
    fastapi_app.dependency_overrides[get_today] = lambda: TODAY
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator:
    """Create async HTTP client for testing"""
    from httpx import AsyncClient, ASGITransport

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def team_headers(team) -> dict:
    """Headers carrying the team's access code"""
    return {"X-Access-Code": team["access_code"]}
