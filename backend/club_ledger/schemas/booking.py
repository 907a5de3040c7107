"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from club_ledger.schemas.common import Money

TicketType = Literal["vip", "regular", "student"]
PaymentStatus = Literal["pending", "paid", "cancelled"]


class BookingCreate(BaseModel):
    """
    Public purchase request. Unknown fields (a client-side total_amount, a
    payment_status) are dropped: the price is always derived server-side.
    """

    # Any integer; an id with no match is a 404 from the ledger, not a 400
    match_id: int
    customer_name: str = Field(..., min_length=1, max_length=100)
    customer_email: EmailStr
    customer_phone: str = Field(..., min_length=1, max_length=20)
    ticket_type: TicketType
    quantity: int = Field(..., ge=1, le=50)

    model_config = {"str_strip_whitespace": True, "extra": "ignore"}

    @field_validator("customer_email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        if len(value) > 100:
            raise ValueError("customer_email must be at most 100 characters")
        return value.lower()


class BookingStatusUpdate(BaseModel):
    # Validated in the service so the error lists the allowed values
    payment_status: str


class MatchSummary(BaseModel):
    id: int
    opponent: str
    match_date: datetime
    venue: str

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    id: int
    booking_reference: str
    match_id: int
    customer_name: str
    customer_email: str
    customer_phone: str
    ticket_type: str
    quantity: int
    total_amount: Money
    payment_status: str
    created_at: datetime
    match: Optional[MatchSummary] = None

    model_config = {"from_attributes": True}


class BookingStats(BaseModel):
    total_bookings: int
    total_tickets: int
    total_revenue: Money
    paid_revenue: Money
    vip_tickets: int
    regular_tickets: int
    student_tickets: int


class MatchRevenue(BaseModel):
    id: int
    opponent: str
    match_date: datetime
    total_bookings: int
    total_tickets: int
    total_revenue: Money
    vip_tickets: int
    regular_tickets: int
    student_tickets: int
