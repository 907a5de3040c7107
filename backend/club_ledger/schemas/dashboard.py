"""
Pydantic schemas for the admin dashboard view.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from club_ledger.schemas.booking import BookingStats
from club_ledger.schemas.common import Money
from club_ledger.schemas.revenue import RevenueSummary
from club_ledger.schemas.settings import TicketPrices


class PlayerSummary(BaseModel):
    id: int
    name: str
    jersey_number: int
    position: str
    goals: int
    assists: int
    appearances: int

    model_config = {"from_attributes": True}


class MatchListing(BaseModel):
    id: int
    opponent: str
    match_date: datetime
    venue: str
    competition: str
    status: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None

    model_config = {"from_attributes": True}


class PlayersBlock(BaseModel):
    total: int
    list: list[PlayerSummary]


class MatchesBlock(BaseModel):
    upcoming: int
    upcoming_list: list[MatchListing]
    recent_results: list[MatchListing]


class DashboardStats(BaseModel):
    players: PlayersBlock
    matches: MatchesBlock
    bookings: BookingStats
    revenue: RevenueSummary
    ticket_prices: TicketPrices
    top_performers: list[PlayerSummary]
    total_income: Money
