"""
Shared test fixtures for pytest.

Provides:
- fake_settings: Test environment configuration
- make_token: Helper to create session tokens
- engine / session_factory / db: Real temp-file SQLite via aiosqlite
- mock_db_session: AsyncMock session for unit tests
- test_app / client: FastAPI app on the temp database + ASGI client
- user_id / auth_headers: A fixed caller and its Bearer header
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import jwt
import pytest
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

import lifesync.models  # noqa: F401 - registers all models with Base.metadata
from lifesync.config import Environment, Settings, get_settings
from lifesync.database import Base, build_engine, build_session_factory
from lifesync.telemetry.logging import clear_context

TEST_JWT_SECRET = "test-only-jwt-secret"


# ------------------------------------------------------------------ #
# Session-scoped: clear settings cache between test sessions
# ------------------------------------------------------------------ #

@pytest.fixture(autouse=True, scope="session")
def _clear_settings_cache():
    """Clear the lru_cache on get_settings so test overrides take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Drop request/user ids bound by a previous test."""
    yield
    clear_context()


def make_token(
    user_id: str,
    *,
    secret: str = TEST_JWT_SECRET,
    expires_in: int = 3600,
    extra: dict[str, Any] | None = None,
) -> str:
    """Create a session token the way the auth service issues them."""
    now = int(datetime.now(UTC).timestamp())
    payload: dict[str, Any] = {"userId": user_id, "iat": now, "exp": now + expires_in}
    payload.update(extra or {})
    return jwt.encode(payload, secret, algorithm="HS256")


# ------------------------------------------------------------------ #
# Settings
# ------------------------------------------------------------------ #

@pytest.fixture
def fake_settings(tmp_path) -> Settings:
    return Settings(
        environment=Environment.TEST,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'lifesync.db'}",
        jwt_secret=TEST_JWT_SECRET,
        resurrected_email_domain="lifesync.test",
        sync_retry_backoff_seconds=0,
    )


# ------------------------------------------------------------------ #
# Database
# ------------------------------------------------------------------ #

@pytest.fixture
async def engine(fake_settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """Temp-file SQLite engine with every table created."""
    engine = build_engine(fake_settings.database_url, for_test=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session() -> AsyncSession:
    """Mock async database session for unit tests.

    The execute() return value is a MagicMock so that synchronous result
    methods like .scalar() and .scalars() return plain values rather than
    coroutines.
    """
    mock = AsyncMock(spec=AsyncSession)
    mock.execute = AsyncMock()
    mock.execute.return_value = MagicMock()
    mock.scalar = AsyncMock(return_value=None)
    mock.commit = AsyncMock()
    mock.rollback = AsyncMock()
    mock.flush = AsyncMock()
    mock.add = MagicMock()
    return mock


# ------------------------------------------------------------------ #
# App & HTTP client
# ------------------------------------------------------------------ #

@pytest.fixture
def test_app(
    fake_settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> FastAPI:
    """FastAPI app wired to the temp database and test settings."""
    from lifesync.api.sync import get_read_session_factory
    from lifesync.database import get_db_session
    from lifesync.main import create_app

    app = create_app()

    async def _test_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_settings] = lambda: fake_settings
    app.dependency_overrides[get_db_session] = _test_db_session
    app.dependency_overrides[get_read_session_factory] = lambda: session_factory
    return app


@pytest.fixture
async def client(test_app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client for the app (no real server)."""
    transport = httpx.ASGITransport(app=test_app)  # type: ignore[arg-type]
    async with httpx.AsyncClient(
        transport=transport,
        base_url="http://testserver",
    ) as ac:
        yield ac


@pytest.fixture
def user_id() -> str:
    return "user-4f8a2c91"


@pytest.fixture
def auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id)}"}
