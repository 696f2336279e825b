"""Pytest fixtures for testing."""
import os
from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from helpers import TEST_JWT_SECRET, USER_A, USER_B, auth_headers

# Must be set before any app imports that trigger Settings validation
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = TEST_JWT_SECRET
os.environ["DEV_MODE"] = "false"
os.environ["AUTH0_AUDIENCE"] = ""
os.environ["ROUTE_PREFIX"] = ""

from models.base import Base  # noqa: E402


@pytest.fixture
async def async_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Create a fresh SQLite database for each test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """A session for arranging and inspecting storage directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(session_factory: async_sessionmaker[AsyncSession]):  # noqa: ANN201
    """The FastAPI app with its database session pointed at the test database."""
    # Clear the settings cache so it picks up the environment set above
    from core.config import get_settings

    get_settings.cache_clear()

    from api.main import app
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_async_session
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def anon_client(app) -> AsyncGenerator[AsyncClient]:  # noqa: ANN001
    """Client without credentials."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client


@pytest.fixture
def client_for(app) -> Callable[[str], AsyncClient]:  # noqa: ANN001
    """Factory for clients authenticated as a given user."""
    def _client(user_id: str) -> AsyncClient:
        return AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            headers=auth_headers(user_id),
        )
    return _client


@pytest.fixture
async def client(
    client_for: Callable[[str], AsyncClient],
) -> AsyncGenerator[AsyncClient]:
    """Client authenticated as USER_A."""
    async with client_for(USER_A) as test_client:
        yield test_client


@pytest.fixture
async def client_b(
    client_for: Callable[[str], AsyncClient],
) -> AsyncGenerator[AsyncClient]:
    """Client authenticated as USER_B."""
    async with client_for(USER_B) as test_client:
        yield test_client
