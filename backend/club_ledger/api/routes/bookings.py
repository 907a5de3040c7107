"""
Public booking endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from club_ledger.db.session import get_db
from club_ledger.schemas.booking import BookingCreate, BookingResponse
from club_ledger.schemas.common import ApiResponse, ok
from club_ledger.services import booking_service
from club_ledger.services.idempotency_service import get_cached_response, get_redis, set_cached_response
from club_ledger.core.exceptions import NotFound, PricingUnavailable, ReferenceExhausted, ValidationFailed
from club_ledger.core.logging import get_logger
from club_ledger.core.metrics import record_booking_attempt

logger = get_logger(__name__)
router = APIRouter(prefix="/bookings", tags=["Bookings"])


def _failure_label(error: Exception) -> str:
    if isinstance(error, ValidationFailed):
        return "invalid"
    if isinstance(error, NotFound):
        return "not_found"
    if isinstance(error, PricingUnavailable):
        return "pricing_unavailable"
    if isinstance(error, ReferenceExhausted):
        return "exhausted"
    return "error"


@router.post(
    "",
    response_model=ApiResponse[BookingResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(
    booking_data: BookingCreate,
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
    db: AsyncSession = Depends(get_db),
):
    """
    Buy tickets for a match.

    The price is derived from the configured ticket prices; any total the
    client sends is ignored. Send an Idempotency-Key header to make retries
    safe: a repeated key returns the original booking.
    """
    redis_client = await get_redis() if idempotency_key else None
    cached = await get_cached_response(redis_client, idempotency_key)
    if cached:
        return JSONResponse(status_code=status.HTTP_201_CREATED, content=cached)

    try:
        booking = await booking_service.create_booking(db, booking_data)
        await db.commit()
    except Exception as e:
        record_booking_attempt(_failure_label(e))
        raise

    record_booking_attempt("success")
    payload = ApiResponse[BookingResponse](
        data=BookingResponse.model_validate(booking),
        message="Booking created successfully",
    ).model_dump(mode="json")
    await set_cached_response(redis_client, idempotency_key, payload)
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=payload)


@router.get("", response_model=ApiResponse[list[BookingResponse]])
async def list_customer_bookings(
    email: str = Query(..., min_length=3, max_length=100),
    db: AsyncSession = Depends(get_db),
):
    """Bookings for one customer email. There is no unauthenticated full listing."""
    bookings = await booking_service.get_by_email(db, email)
    return ok(bookings)


@router.get("/reference/{reference}", response_model=ApiResponse[BookingResponse])
async def get_booking_by_reference(
    reference: str,
    db: AsyncSession = Depends(get_db),
):
    booking = await booking_service.get_by_reference(db, reference)
    return ok(booking)
