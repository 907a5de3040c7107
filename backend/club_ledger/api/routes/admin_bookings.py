"""
Admin booking endpoints: listing, statistics, status transitions, deletion.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from club_ledger.db.session import get_db
from club_ledger.schemas.booking import BookingResponse, BookingStats, BookingStatusUpdate, MatchRevenue
from club_ledger.schemas.common import ApiResponse, ok
from club_ledger.services import booking_service

router = APIRouter(prefix="/bookings", tags=["Admin: Bookings"])


@router.get("", response_model=ApiResponse[list[BookingResponse]])
async def list_bookings(db: AsyncSession = Depends(get_db)):
    """All bookings with match metadata, newest first."""
    return ok(await booking_service.list_all(db))


@router.get("/stats", response_model=ApiResponse[BookingStats])
async def booking_stats(db: AsyncSession = Depends(get_db)):
    return ok(await booking_service.get_stats(db))


@router.get("/revenue-by-match", response_model=ApiResponse[list[MatchRevenue]])
async def revenue_by_match(db: AsyncSession = Depends(get_db)):
    """Ticket sales per match, including matches with no bookings."""
    return ok(await booking_service.get_revenue_by_match(db))


@router.get("/match/{match_id}", response_model=ApiResponse[list[BookingResponse]])
async def bookings_for_match(match_id: int, db: AsyncSession = Depends(get_db)):
    return ok(await booking_service.get_by_match(db, match_id))


@router.get("/{booking_id}", response_model=ApiResponse[BookingResponse])
async def get_booking(booking_id: int, db: AsyncSession = Depends(get_db)):
    return ok(await booking_service.get_by_id(db, booking_id))


@router.put("/{booking_id}/status", response_model=ApiResponse[BookingResponse])
async def update_booking_status(
    booking_id: int,
    body: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    booking = await booking_service.update_payment_status(db, booking_id, body.payment_status)
    return ok(booking, "Payment status updated")


@router.post("/{booking_id}/confirm", response_model=ApiResponse[BookingResponse])
async def confirm_booking_payment(booking_id: int, db: AsyncSession = Depends(get_db)):
    booking = await booking_service.confirm_payment(db, booking_id)
    return ok(booking, "Payment confirmed")


@router.post("/{booking_id}/cancel", response_model=ApiResponse[BookingResponse])
async def cancel_booking(booking_id: int, db: AsyncSession = Depends(get_db)):
    booking = await booking_service.cancel_booking(db, booking_id)
    return ok(booking, "Booking cancelled successfully")


@router.delete("/{booking_id}", response_model=ApiResponse[None])
async def delete_booking(booking_id: int, db: AsyncSession = Depends(get_db)):
    await booking_service.delete_booking(db, booking_id)
    return ok(message="Booking deleted successfully")
