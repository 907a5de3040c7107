"""
Reporting facade for the admin dashboard.

Every sub-query runs concurrently in its own session (an AsyncSession cannot
be shared between concurrent tasks). asyncio.gather propagates the first
failure, so the dashboard is all-or-nothing: no partial response is built.
"""

import asyncio
from typing import Any, Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from club_ledger.core.logging import get_logger
from club_ledger.core.normalize import round_money
from club_ledger.services import booking_service, match_service, player_service, revenue_service, settings_service

logger = get_logger(__name__)

RECENT_RESULTS_LIMIT = 5
TOP_PERFORMERS_LIMIT = 5


async def _in_session(
    session_factory: async_sessionmaker,
    query: Callable[..., Awaitable[Any]],
    *args: Any,
) -> Any:
    async with session_factory() as session:
        return await query(session, *args)


async def get_dashboard_stats(session_factory: async_sessionmaker) -> dict:
    (
        players,
        upcoming,
        recent_results,
        booking_stats,
        revenue_summary,
        ticket_prices,
        top_performers,
    ) = await asyncio.gather(
        _in_session(session_factory, player_service.list_active),
        _in_session(session_factory, match_service.list_upcoming),
        _in_session(session_factory, match_service.list_completed, RECENT_RESULTS_LIMIT),
        _in_session(session_factory, booking_service.get_stats),
        _in_session(session_factory, revenue_service.get_summary),
        _in_session(session_factory, settings_service.get_ticket_prices),
        _in_session(session_factory, player_service.top_scorers, TOP_PERFORMERS_LIMIT),
    )

    total_income = round_money(booking_stats["paid_revenue"] + revenue_summary["total_revenue"])
    logger.debug("dashboard_composed", players=len(players), upcoming=len(upcoming))

    return {
        "players": {"total": len(players), "list": players},
        "matches": {
            "upcoming": len(upcoming),
            "upcoming_list": upcoming,
            "recent_results": recent_results,
        },
        "bookings": booking_stats,
        "revenue": revenue_summary,
        "ticket_prices": ticket_prices,
        "top_performers": top_performers,
        "total_income": total_income,
    }
