"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL.  The production models carry no PostgreSQL-only column
types, so the real metadata is created directly.  Routed distances come
from stub providers; nothing talks to Google.
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.domain.entities import GeoPoint
from src.domain.enums import DriverStatus, MealTime, TravelMode
from src.infrastructure.database import Base
from src.infrastructure.models import UserModel  # noqa: F401  (registers tables)
from src.infrastructure.repositories import UserRepository


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

# Near Lovett College, ~0.16 mi east of Baker servery
CAMPUS_USER = GeoPoint(29.7165, -95.3990)


# ── Stub route providers ──────────────────────────────────────────────


class StubRouteProvider:
    """Returns a fixed mile value, or raises *error*; records every call."""

    def __init__(self, miles: Optional[float] = None, error: Optional[Exception] = None):
        self.miles = miles
        self.error = error
        self.calls: list[tuple] = []

    async def route_miles(self, origin, destination, mode: TravelMode) -> float:
        self.calls.append((origin, destination, mode))
        if self.error is not None:
            raise self.error
        return self.miles


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Create tables on a fresh in-memory engine, then drop everything."""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def people(session_factory) -> dict[str, str]:
    """A customer, an online dasher and a plain student; returns their ids."""
    async with session_factory() as session:
        repo = UserRepository(session)
        customer = await repo.create_user(
            first_name="Ava", last_name="Nguyen",
            email="ava@rice.edu", phone_number="713-555-0101",
        )
        dasher = await repo.create_user(
            first_name="Ethan", last_name="Brooks", email="ethan@rice.edu",
        )
        await repo.set_driver_status(dasher, DriverStatus.ONLINE)
        other = await repo.create_user(
            first_name="Maya", last_name="Okafor", email="maya@rice.edu",
        )
        ids = {"customer": customer.id, "dasher": dasher.id, "other": other.id}
        await session.commit()
    return ids


@pytest.fixture
def route_provider() -> StubRouteProvider:
    """Routing that always fails; tests override for routed distances."""
    return StubRouteProvider(error=RuntimeError("routing offline"))


@pytest.fixture
def app(session_factory, route_provider):
    """App backed by SQLite, stub routing and a fixed meal time."""
    from src.api.app import create_app
    from src.api.dependencies import get_db, get_meal_time, get_route_provider
    from src.api.middleware import limiter

    async def _test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app = create_app()
    app.dependency_overrides[get_db] = _test_db
    app.dependency_overrides[get_route_provider] = lambda: route_provider
    app.dependency_overrides[get_meal_time] = lambda: MealTime.LUNCH_DINNER
    limiter.reset()
    return app


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
