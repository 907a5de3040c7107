"""
Booking ledger: priced, uniquely-referenced ticket purchases.

PRICING
=======

The client never supplies the price. The unit price for the ticket type is
read from the configuration store inside the booking transaction and

    total_amount = round_half_up(unit_price * quantity, 2)

A missing or malformed price is a server misconfiguration (PricingUnavailable),
never a zero-price fallback.

REFERENCE STRATEGY: Optimistic Insert with Retry
================================================

Problem:
  booking_reference must be unique for the lifetime of the system, under any
  number of concurrent writers.

Solution:
  1. Generate BK + YYYYMMDD (UTC) + 10 hex chars from `secrets`
  2. INSERT and let the unique constraint on booking_reference decide
  3. If the IntegrityError names booking_reference, roll back and regenerate
  4. Give up after MAX_REFERENCE_ATTEMPTS with ReferenceExhausted

  40 bits of randomness plus a daily prefix make collisions rare, so no lock
  or pre-claim is taken. Any other IntegrityError (FK, CHECK) is not a
  collision and propagates on the first attempt.
"""

import secrets
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from club_ledger.core.config import get_settings
from club_ledger.core.exceptions import NotFound, ReferenceExhausted, ValidationFailed
from club_ledger.core.logging import get_logger
from club_ledger.core.metrics import booking_latency, record_reference_collision, record_status_change
from club_ledger.core.normalize import round_money
from club_ledger.models.booking import PAYMENT_STATUSES, Booking
from club_ledger.models.match import Match
from club_ledger.schemas.booking import BookingCreate
from club_ledger.services import match_service, settings_service

logger = get_logger(__name__)

MAX_REFERENCE_ATTEMPTS = 5
REFERENCE_PREFIX = "BK"


def generate_reference() -> str:
    date_part = datetime.now(timezone.utc).strftime("%Y%m%d")
    return f"{REFERENCE_PREFIX}{date_part}{secrets.token_hex(5).upper()}"


def _is_reference_collision(error: IntegrityError) -> bool:
    return "booking_reference" in str(error.orig)


def _initial_status() -> str:
    # Synchronous settlement stub: without a payment provider every booking is
    # paid on creation. Disable to create pending bookings and settle them via
    # confirm_payment().
    return "paid" if get_settings().BOOKING_SETTLE_ON_CREATE else "pending"


async def create_booking(db: AsyncSession, data: BookingCreate) -> Booking:
    """
    Create a booking from an already schema-validated request.
    Raises NotFound for an unknown match, PricingUnavailable when the price is
    not configured and ReferenceExhausted after repeated reference collisions.
    """
    with booking_latency.time():
        if not await match_service.match_exists(db, data.match_id):
            raise NotFound(f"Match {data.match_id} not found")

        unit_price = await settings_service.get_unit_price(db, data.ticket_type)
        total_amount = round_money(unit_price * data.quantity)
        payment_status = _initial_status()

        for attempt in range(1, MAX_REFERENCE_ATTEMPTS + 1):
            reference = generate_reference()
            booking = Booking(
                match_id=data.match_id,
                customer_name=data.customer_name,
                customer_email=data.customer_email.lower(),
                customer_phone=data.customer_phone,
                ticket_type=data.ticket_type,
                quantity=data.quantity,
                total_amount=total_amount,
                booking_reference=reference,
                payment_status=payment_status,
            )
            db.add(booking)
            try:
                await db.flush()
            except IntegrityError as e:
                await db.rollback()
                if not _is_reference_collision(e):
                    raise
                record_reference_collision()
                logger.warning(
                    "booking_reference_collision",
                    reference=reference,
                    attempt=attempt,
                )
                continue

            await db.refresh(booking)
            logger.info(
                "booking_created",
                booking_id=booking.id,
                reference=booking.booking_reference,
                match_id=data.match_id,
                ticket_type=data.ticket_type,
                quantity=data.quantity,
                total_amount=str(total_amount),
                attempt=attempt,
            )
            return booking

    logger.error("booking_reference_exhausted", match_id=data.match_id, attempts=MAX_REFERENCE_ATTEMPTS)
    raise ReferenceExhausted()


# ---------- reads ----------

async def list_all(db: AsyncSession) -> list[Booking]:
    result = await db.execute(
        select(Booking).order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    return list(result.scalars().all())


async def get_by_id(db: AsyncSession, booking_id: int) -> Booking:
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if not booking:
        raise NotFound(f"Booking {booking_id} not found")
    return booking


async def get_by_reference(db: AsyncSession, reference: str) -> Booking:
    ref = (reference or "").strip()
    result = await db.execute(select(Booking).where(Booking.booking_reference == ref))
    booking = result.scalar_one_or_none()
    if not ref or not booking:
        raise NotFound("Booking not found")
    return booking


async def get_by_match(db: AsyncSession, match_id: int) -> list[Booking]:
    result = await db.execute(
        select(Booking)
        .where(Booking.match_id == match_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    return list(result.scalars().all())


async def get_by_email(db: AsyncSession, email: str) -> list[Booking]:
    """Emails are stored lower-cased, so lookups ignore the caller's casing."""
    normalized = (email or "").strip().lower()
    if not normalized:
        return []
    result = await db.execute(
        select(Booking)
        .where(Booking.customer_email == normalized)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    return list(result.scalars().all())


# ---------- status transitions ----------

async def _set_status(db: AsyncSession, booking: Booking, status: str) -> Booking:
    previous = booking.payment_status
    booking.payment_status = status
    await db.flush()
    await db.refresh(booking)
    record_status_change(status)
    logger.info(
        "booking_status_changed",
        booking_id=booking.id,
        reference=booking.booking_reference,
        previous=previous,
        status=status,
    )
    return booking


async def update_payment_status(db: AsyncSession, booking_id: int, status: str) -> Booking:
    s = (status or "").strip()
    if s not in PAYMENT_STATUSES:
        raise ValidationFailed(
            f"Invalid payment status. Allowed: {', '.join(PAYMENT_STATUSES)}",
            field="payment_status",
            allowed=PAYMENT_STATUSES,
        )
    booking = await get_by_id(db, booking_id)
    return await _set_status(db, booking, s)


async def confirm_payment(db: AsyncSession, booking_id: int) -> Booking:
    """Explicit settlement: pending -> paid."""
    booking = await get_by_id(db, booking_id)
    if booking.payment_status != "pending":
        raise ValidationFailed(
            f"Only pending bookings can be confirmed (current: {booking.payment_status})",
            field="payment_status",
        )
    return await _set_status(db, booking, "paid")


async def cancel_booking(db: AsyncSession, booking_id: int) -> Booking:
    booking = await get_by_id(db, booking_id)
    if booking.payment_status == "cancelled":
        raise ValidationFailed("Booking is already cancelled", field="payment_status")
    return await _set_status(db, booking, "cancelled")


async def delete_booking(db: AsyncSession, booking_id: int) -> None:
    booking = await get_by_id(db, booking_id)
    await db.delete(booking)
    await db.flush()
    logger.warning("booking_deleted", booking_id=booking_id, reference=booking.booking_reference)


# ---------- reporting ----------

def _tickets_of(ticket_type: str):
    return func.coalesce(
        func.sum(case((Booking.ticket_type == ticket_type, Booking.quantity), else_=0)), 0
    )


async def get_stats(db: AsyncSession) -> dict:
    """All booking statistics in one aggregate query."""
    result = await db.execute(
        select(
            func.count(Booking.id).label("total_bookings"),
            func.coalesce(func.sum(Booking.quantity), 0).label("total_tickets"),
            func.coalesce(func.sum(Booking.total_amount), 0).label("total_revenue"),
            func.coalesce(
                func.sum(case((Booking.payment_status == "paid", Booking.total_amount), else_=0)), 0
            ).label("paid_revenue"),
            _tickets_of("vip").label("vip_tickets"),
            _tickets_of("regular").label("regular_tickets"),
            _tickets_of("student").label("student_tickets"),
        )
    )
    row = result.one()
    return {
        "total_bookings": int(row.total_bookings or 0),
        "total_tickets": int(row.total_tickets or 0),
        "total_revenue": round_money(Decimal(str(row.total_revenue or 0))),
        "paid_revenue": round_money(Decimal(str(row.paid_revenue or 0))),
        "vip_tickets": int(row.vip_tickets or 0),
        "regular_tickets": int(row.regular_tickets or 0),
        "student_tickets": int(row.student_tickets or 0),
    }


async def get_revenue_by_match(db: AsyncSession) -> list[dict]:
    """
    Ticket sales per match. LEFT JOIN so matches without bookings are listed
    with zeros instead of being dropped.
    """
    result = await db.execute(
        select(
            Match.id,
            Match.opponent,
            Match.match_date,
            func.count(Booking.id).label("total_bookings"),
            func.coalesce(func.sum(Booking.quantity), 0).label("total_tickets"),
            func.coalesce(func.sum(Booking.total_amount), 0).label("total_revenue"),
            _tickets_of("vip").label("vip_tickets"),
            _tickets_of("regular").label("regular_tickets"),
            _tickets_of("student").label("student_tickets"),
        )
        .select_from(Match)
        .outerjoin(Booking, Booking.match_id == Match.id)
        .group_by(Match.id, Match.opponent, Match.match_date)
        .order_by(Match.match_date.desc())
    )
    return [
        {
            "id": row.id,
            "opponent": row.opponent,
            "match_date": row.match_date,
            "total_bookings": int(row.total_bookings or 0),
            "total_tickets": int(row.total_tickets or 0),
            "total_revenue": round_money(Decimal(str(row.total_revenue or 0))),
            "vip_tickets": int(row.vip_tickets or 0),
            "regular_tickets": int(row.regular_tickets or 0),
            "student_tickets": int(row.student_tickets or 0),
        }
        for row in result
    ]
