"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL, and a scripted in-process geocoder so no request ever
reaches Nominatim.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.config import Settings
from src.domain.entities import GeocodeCandidate
from src.infrastructure.database import Base
from src.infrastructure import models  # noqa: F401  (registers tables)


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

# StaticPool: every session shares the one in-memory database
test_engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
TestSessionFactory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


def make_test_settings(**overrides) -> Settings:
    values = {
        "database_url": TEST_DB_URL,
        "geocoder_request_delay_seconds": 0.0,
        "rate_limit_enabled": False,
        "log_level": "WARNING",
        "log_dir": None,
        "jwt_secret": "test-secret-key-that-is-at-least-32-bytes",
    }
    values.update(overrides)
    return Settings(**values)


# ── Geocoder stub ─────────────────────────────────────────────────────

# Real-world coordinates as Nominatim returns them (strings)
PLACES = {
    "New York, NY": GeocodeCandidate(
        "New York, United States", "40.7128", "-74.0060"
    ),
    "Los Angeles, CA": GeocodeCandidate(
        "Los Angeles, California, United States", "34.0522", "-118.2437"
    ),
    "London": GeocodeCandidate("London, England, United Kingdom", "51.5074", "-0.1278"),
    "Paris": GeocodeCandidate("Paris, Ile-de-France, France", "48.8566", "2.3522"),
}


class FakeGeocoder:
    """Answers from a fixed table and records every call."""

    def __init__(self, places=None, error: Exception | None = None):
        self.places = dict(PLACES if places is None else places)
        self.error = error
        self.calls: list[dict] = []

    async def search(self, query, *, limit=None, address_details=False):
        self.calls.append(
            {"query": query, "limit": limit, "address_details": address_details}
        )
        if self.error is not None:
            raise self.error
        hit = self.places.get(query)
        if hit is None:
            return []
        if isinstance(hit, list):
            return hit[:limit] if limit else hit
        return [hit]


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield a session, then drop everything."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionFactory() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture
def test_settings() -> Settings:
    return make_test_settings()


@pytest_asyncio.fixture
async def app(geocoder, test_settings):
    """FastAPI app wired to SQLite and the fake geocoder."""
    from src.api.app import create_app
    from src.api.dependencies import get_db, get_geocoder
    from src.api.middleware import limiter

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async def _test_db():
        async with TestSessionFactory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application = create_app(test_settings)
    application.dependency_overrides[get_db] = _test_db
    application.dependency_overrides[get_geocoder] = lambda: geocoder

    # create_app applied test_settings to the shared limiter; start from empty counters
    limiter.reset()
    try:
        yield application
    finally:
        limiter.reset()
        await application.state.http_client.aclose()
        await application.state.engine.dispose()
        async with test_engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
