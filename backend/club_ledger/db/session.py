"""
Async engine, session factory and the per-request session dependency.

One session (and one transaction) per request: committed when the handler
returns, rolled back when it raises. Services flush but never commit, so a
booking insert or a multi-key settings write lands atomically with the rest
of the request.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from club_ledger.core.config import get_settings

settings = get_settings()


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": True,
    }


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **_engine_options(settings.DATABASE_URL),
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_session_factory() -> async_sessionmaker:
    """Factory for read paths that fan out over several sessions concurrently."""
    return AsyncSessionLocal


async def init_models() -> None:
    """Create tables and seed default settings (local development only)."""
    from club_ledger.db.base import Base
    from club_ledger import models  # noqa: F401 - register tables
    from club_ledger.services.settings_service import seed_defaults

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        await seed_defaults(session)
        await session.commit()
