"""
Pydantic schemas for manually recorded revenue.

Inputs are loosely typed on purpose (amount may arrive as "12.50", dates as ISO
datetimes); the service normalizes them and raises ValidationFailed with the
allowed values when a field is out of range.
"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from club_ledger.schemas.common import Money


class RevenueCreate(BaseModel):
    source: str
    amount: Any
    description: Optional[str] = Field(None, max_length=255)
    transaction_date: Optional[Any] = None


class RevenueUpdate(BaseModel):
    source: str
    amount: Any
    description: Optional[str] = Field(None, max_length=255)
    transaction_date: Any


class RevenueResponse(BaseModel):
    id: int
    source: str
    amount: Money
    description: Optional[str]
    transaction_date: date
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SourceBreakdown(BaseModel):
    source: str
    total_amount: Money
    transaction_count: int


class DateRange(BaseModel):
    start_date: date
    end_date: date


class RevenueSummary(BaseModel):
    range: Optional[DateRange] = None
    breakdown: list[SourceBreakdown]
    total_revenue: Money


class MonthlyRevenue(BaseModel):
    year: int
    month: int
    breakdown: list[SourceBreakdown]
    total_revenue: Money


class YearlyRevenueRow(BaseModel):
    month: int
    source: str
    total_amount: Money
    transaction_count: int
