"""
Read-only squad listings for the dashboard.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from club_ledger.models.player import Player


async def list_active(db: AsyncSession) -> list[Player]:
    result = await db.execute(
        select(Player).where(Player.is_active.is_(True)).order_by(Player.jersey_number.asc())
    )
    return list(result.scalars().all())


async def top_scorers(db: AsyncSession, limit: int = 5) -> list[Player]:
    result = await db.execute(
        select(Player)
        .where(Player.is_active.is_(True))
        .order_by(Player.goals.desc(), Player.assists.desc(), Player.appearances.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
