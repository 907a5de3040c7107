"""
Public read-only settings: ticket prices and club info for the website.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from club_ledger.db.session import get_db
from club_ledger.schemas.common import ApiResponse, ok
from club_ledger.schemas.settings import TicketPrices
from club_ledger.services import settings_service

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/ticket-prices", response_model=ApiResponse[TicketPrices])
async def get_ticket_prices(db: AsyncSession = Depends(get_db)):
    return ok(await settings_service.get_ticket_prices(db))


@router.get("/club-info", response_model=ApiResponse[dict[str, str]])
async def get_club_info(db: AsyncSession = Depends(get_db)):
    return ok(await settings_service.get_club_info(db))
