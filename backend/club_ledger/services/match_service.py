"""
Match lookups used by the ledger: existence check for bookings and the
listings shown on the admin dashboard. Fixture CRUD lives elsewhere.
"""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from club_ledger.models.match import Match

# matches.id is a 32-bit INTEGER
MAX_ID = 2**31 - 1


async def match_exists(db: AsyncSession, match_id: int) -> bool:
    if not 1 <= match_id <= MAX_ID:
        return False
    result = await db.execute(select(Match.id).where(Match.id == match_id).limit(1))
    return result.scalar_one_or_none() is not None


async def list_upcoming(db: AsyncSession) -> list[Match]:
    """Upcoming fixtures, soonest first. Uses ix_matches_status / ix_matches_match_date."""
    result = await db.execute(
        select(Match)
        .where(Match.status == "upcoming", Match.match_date >= datetime.now(timezone.utc))
        .order_by(Match.match_date.asc())
    )
    return list(result.scalars().all())


async def list_completed(db: AsyncSession, limit: int = 10) -> list[Match]:
    result = await db.execute(
        select(Match)
        .where(Match.status == "completed")
        .order_by(Match.match_date.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
