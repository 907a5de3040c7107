"""
Pydantic schemas for the configuration store endpoints.
"""

from typing import Any, Optional

from pydantic import BaseModel


class TicketPrices(BaseModel):
    vip: int
    regular: int
    student: int


class TicketPricesUpdate(BaseModel):
    # Coerced and range-checked by the settings service, all three required
    vip: Any = None
    regular: Any = None
    student: Any = None


class MembershipFee(BaseModel):
    membership_fee: int


class MembershipFeeUpdate(BaseModel):
    fee: Any = None


class ClubInfoUpdate(BaseModel):
    club_name: Optional[str] = None
    club_slogan: Optional[str] = None
    club_nickname: Optional[str] = None
    club_location: Optional[str] = None
    club_email: Optional[str] = None
    club_phone: Optional[str] = None
    # Friendly aliases sent by the admin console
    name: Optional[str] = None
    slogan: Optional[str] = None
    nickname: Optional[str] = None
    location: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
