"""
Pytest fixtures for test database, client, and authentication.

Each test gets its own SQLite file (aiosqlite) with the schema created and
the default settings seeded. A file rather than :memory: so the dashboard's
concurrent sessions see the same committed data.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("REDIS_ENABLED", "false")

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from club_ledger.main import app
from club_ledger.db.base import Base
from club_ledger.db.session import get_db, get_session_factory
from club_ledger.core.security import create_access_token
from club_ledger.models import Match, Player
from club_ledger.services.settings_service import seed_defaults


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh schema + default settings per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with factory() as session:
        await seed_defaults(session)
        await session.commit()

    yield factory

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    session_factory: async_sessionmaker,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependencies with the test database."""

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    token = create_access_token(data={"sub": "1", "role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def member_headers() -> dict:
    token = create_access_token(data={"sub": "2", "role": "member"})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_match(db_session: AsyncSession) -> Match:
    """An upcoming home league match."""
    match = Match(
        opponent="Nakuru City",
        match_date=datetime.now(timezone.utc) + timedelta(days=14),
        venue="home",
        competition="league",
        status="upcoming",
    )
    db_session.add(match)
    await db_session.commit()
    await db_session.refresh(match)
    return match


@pytest_asyncio.fixture
async def completed_match(db_session: AsyncSession) -> Match:
    match = Match(
        opponent="Molo Stars",
        match_date=datetime.now(timezone.utc) - timedelta(days=7),
        venue="away",
        competition="cup",
        status="completed",
        home_score=1,
        away_score=2,
    )
    db_session.add(match)
    await db_session.commit()
    await db_session.refresh(match)
    return match


@pytest_asyncio.fixture
async def squad(db_session: AsyncSession) -> list[Player]:
    players = [
        Player(name="Brian Otieno", jersey_number=9, position="forward", age=24, goals=11, assists=3),
        Player(name="Kevin Mwangi", jersey_number=10, position="midfielder", age=22, goals=4, assists=9),
        Player(name="Peter Kiprono", jersey_number=1, position="goalkeeper", age=29),
        Player(name="Retired Legend", jersey_number=7, position="forward", age=38, goals=40, is_active=False),
    ]
    db_session.add_all(players)
    await db_session.commit()
    return players


def booking_payload(match_id: int, **overrides) -> dict:
    payload = {
        "match_id": match_id,
        "customer_name": "Jane Wanjiru",
        "customer_email": "Jane@Example.com",
        "customer_phone": "+254711000111",
        "ticket_type": "vip",
        "quantity": 4,
    }
    payload.update(overrides)
    return payload
