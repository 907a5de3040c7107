"""
Admin configuration endpoints. Multi-key updates are all-or-nothing.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from club_ledger.db.session import get_db
from club_ledger.schemas.common import ApiResponse, ok
from club_ledger.schemas.settings import (
    ClubInfoUpdate,
    MembershipFee,
    MembershipFeeUpdate,
    TicketPrices,
    TicketPricesUpdate,
)
from club_ledger.services import settings_service

router = APIRouter(prefix="/settings", tags=["Admin: Settings"])


@router.get("", response_model=ApiResponse[dict[str, str]])
async def all_settings(db: AsyncSession = Depends(get_db)):
    return ok(await settings_service.get_all(db))


@router.get("/ticket-prices", response_model=ApiResponse[TicketPrices])
async def get_ticket_prices(db: AsyncSession = Depends(get_db)):
    return ok(await settings_service.get_ticket_prices(db))


@router.put("/ticket-prices", response_model=ApiResponse[TicketPrices])
async def update_ticket_prices(body: TicketPricesUpdate, db: AsyncSession = Depends(get_db)):
    prices = await settings_service.set_ticket_prices(db, body.model_dump())
    return ok(prices, "Ticket prices updated")


@router.get("/membership-fee", response_model=ApiResponse[MembershipFee])
async def get_membership_fee(db: AsyncSession = Depends(get_db)):
    return ok({"membership_fee": await settings_service.get_membership_fee(db)})


@router.put("/membership-fee", response_model=ApiResponse[MembershipFee])
async def update_membership_fee(body: MembershipFeeUpdate, db: AsyncSession = Depends(get_db)):
    fee = await settings_service.set_membership_fee(db, body.fee)
    return ok({"membership_fee": fee}, "Membership fee updated")


@router.put("/club-info", response_model=ApiResponse[dict[str, str]])
async def update_club_info(body: ClubInfoUpdate, db: AsyncSession = Depends(get_db)):
    info = await settings_service.set_club_info(db, body.model_dump(exclude_none=True))
    return ok(info, "Club info updated")
