from club_ledger.schemas.common import ApiResponse, Money
from club_ledger.schemas.booking import (
    BookingCreate, BookingResponse, BookingStatusUpdate, BookingStats, MatchRevenue,
)
from club_ledger.schemas.revenue import (
    RevenueCreate, RevenueUpdate, RevenueResponse, RevenueSummary, MonthlyRevenue, YearlyRevenueRow,
)
from club_ledger.schemas.settings import TicketPrices, TicketPricesUpdate, MembershipFeeUpdate, ClubInfoUpdate

__all__ = [
    "ApiResponse", "Money",
    "BookingCreate", "BookingResponse", "BookingStatusUpdate", "BookingStats", "MatchRevenue",
    "RevenueCreate", "RevenueUpdate", "RevenueResponse", "RevenueSummary", "MonthlyRevenue",
    "YearlyRevenueRow",
    "TicketPrices", "TicketPricesUpdate", "MembershipFeeUpdate", "ClubInfoUpdate",
]
