"""
Tests for the booking ledger: server-side pricing, unique references with
retry on collision, status transitions and aggregate statistics.
"""

import re
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from club_ledger.core.exceptions import NotFound, PricingUnavailable, ReferenceExhausted, ValidationFailed
from club_ledger.core.config import get_settings
from club_ledger.schemas.booking import BookingCreate
from club_ledger.services import booking_service, settings_service

from conftest import booking_payload

REFERENCE_RE = re.compile(r"^BK\d{8}[0-9A-F]{10}$")


def make_request(match_id: int, **overrides) -> BookingCreate:
    return BookingCreate(**booking_payload(match_id, **overrides))


def test_reference_format():
    refs = {booking_service.generate_reference() for _ in range(200)}
    assert len(refs) == 200
    assert all(REFERENCE_RE.match(ref) for ref in refs)


@pytest.mark.asyncio
async def test_total_is_price_times_quantity(db_session, test_match):
    booking = await booking_service.create_booking(db_session, make_request(test_match.id))

    assert booking.total_amount == Decimal("80.00")
    assert booking.quantity == 4
    assert booking.customer_email == "jane@example.com"
    assert booking.payment_status == "paid"
    assert REFERENCE_RE.match(booking.booking_reference)
    assert booking.match.opponent == "Nakuru City"


@pytest.mark.asyncio
async def test_client_total_is_ignored(db_session, test_match):
    request = BookingCreate(**booking_payload(test_match.id, quantity=2, total_amount=1))
    booking = await booking_service.create_booking(db_session, request)
    assert booking.total_amount == Decimal("40.00")


@pytest.mark.asyncio
async def test_pending_when_settlement_is_deferred(db_session, test_match, monkeypatch):
    monkeypatch.setattr(get_settings(), "BOOKING_SETTLE_ON_CREATE", False)
    booking = await booking_service.create_booking(db_session, make_request(test_match.id))
    assert booking.payment_status == "pending"

    confirmed = await booking_service.confirm_payment(db_session, booking.id)
    assert confirmed.payment_status == "paid"

    with pytest.raises(ValidationFailed):
        await booking_service.confirm_payment(db_session, booking.id)


@pytest.mark.asyncio
async def test_unknown_match(db_session):
    with pytest.raises(NotFound):
        await booking_service.create_booking(db_session, make_request(9999))


@pytest.mark.asyncio
async def test_missing_price_is_not_free(db_session, test_match):
    match_id = test_match.id
    await settings_service.delete_key(db_session, "ticket_price_student")

    with pytest.raises(PricingUnavailable):
        await booking_service.create_booking(db_session, make_request(match_id, ticket_type="student"))
    assert await booking_service.list_all(db_session) == []


@pytest.mark.asyncio
async def test_reference_collision_is_retried(db_session, test_match, monkeypatch):
    match_id = test_match.id
    existing = await booking_service.create_booking(db_session, make_request(match_id))
    taken = existing.booking_reference
    await db_session.commit()

    fresh = "BK20250101ABCDEF0123"
    sequence = iter([taken, taken, taken, taken, fresh])
    monkeypatch.setattr(booking_service, "generate_reference", lambda: next(sequence))

    booking = await booking_service.create_booking(db_session, make_request(match_id, quantity=1))
    assert booking.booking_reference == fresh
    assert booking.total_amount == Decimal("20.00")
    await db_session.commit()

    assert len(await booking_service.list_all(db_session)) == 2


@pytest.mark.asyncio
async def test_reference_exhausted_after_five_collisions(db_session, test_match, monkeypatch):
    match_id = test_match.id
    existing = await booking_service.create_booking(db_session, make_request(match_id))
    taken = existing.booking_reference
    await db_session.commit()

    calls = []

    def always_taken():
        calls.append(taken)
        return taken

    monkeypatch.setattr(booking_service, "generate_reference", always_taken)

    with pytest.raises(ReferenceExhausted):
        await booking_service.create_booking(db_session, make_request(match_id))
    assert len(calls) == booking_service.MAX_REFERENCE_ATTEMPTS
    assert len(await booking_service.list_all(db_session)) == 1


@pytest.mark.asyncio
async def test_lookups(db_session, test_match):
    match_id = test_match.id
    booking = await booking_service.create_booking(db_session, make_request(match_id))
    await booking_service.create_booking(
        db_session, make_request(match_id, customer_email="someone@else.org", ticket_type="regular")
    )

    assert (await booking_service.get_by_reference(db_session, booking.booking_reference)).id == booking.id
    assert [b.id for b in await booking_service.get_by_email(db_session, "JANE@example.COM")] == [booking.id]
    assert len(await booking_service.get_by_match(db_session, match_id)) == 2
    assert await booking_service.get_by_email(db_session, "  ") == []

    with pytest.raises(NotFound):
        await booking_service.get_by_reference(db_session, "BK00000000FFFFFFFFFF")
    with pytest.raises(NotFound):
        await booking_service.get_by_id(db_session, 12345)


@pytest.mark.asyncio
async def test_status_transitions(db_session, test_match):
    booking = await booking_service.create_booking(db_session, make_request(test_match.id))

    updated = await booking_service.update_payment_status(db_session, booking.id, "pending")
    assert updated.payment_status == "pending"

    with pytest.raises(ValidationFailed) as exc_info:
        await booking_service.update_payment_status(db_session, booking.id, "refunded")
    assert exc_info.value.allowed == ["pending", "paid", "cancelled"]

    cancelled = await booking_service.cancel_booking(db_session, booking.id)
    assert cancelled.payment_status == "cancelled"
    with pytest.raises(ValidationFailed):
        await booking_service.cancel_booking(db_session, booking.id)

    await booking_service.delete_booking(db_session, booking.id)
    with pytest.raises(NotFound):
        await booking_service.get_by_id(db_session, booking.id)


@pytest.mark.asyncio
async def test_stats(db_session, test_match):
    match_id = test_match.id
    await booking_service.create_booking(db_session, make_request(match_id))  # vip x4 = 80
    second = await booking_service.create_booking(
        db_session, make_request(match_id, ticket_type="student", quantity=3)
    )  # 15
    await booking_service.create_booking(
        db_session, make_request(match_id, ticket_type="regular", quantity=2)
    )  # 20
    await booking_service.update_payment_status(db_session, second.id, "pending")

    stats = await booking_service.get_stats(db_session)
    assert stats == {
        "total_bookings": 3,
        "total_tickets": 9,
        "total_revenue": Decimal("115.00"),
        "paid_revenue": Decimal("100.00"),
        "vip_tickets": 4,
        "regular_tickets": 2,
        "student_tickets": 3,
    }


@pytest.mark.asyncio
async def test_stats_when_empty(db_session):
    stats = await booking_service.get_stats(db_session)
    assert stats["total_bookings"] == 0
    assert stats["total_revenue"] == Decimal("0.00")


@pytest.mark.asyncio
async def test_revenue_by_match_includes_matches_without_bookings(db_session, test_match, completed_match):
    upcoming_id, completed_id = test_match.id, completed_match.id
    await booking_service.create_booking(db_session, make_request(upcoming_id, quantity=2))

    rows = await booking_service.get_revenue_by_match(db_session)
    by_id = {row["id"]: row for row in rows}

    assert [row["id"] for row in rows] == [upcoming_id, completed_id]  # latest match first
    assert by_id[upcoming_id]["total_revenue"] == Decimal("40.00")
    assert by_id[upcoming_id]["vip_tickets"] == 2
    assert by_id[completed_id]["total_bookings"] == 0
    assert by_id[completed_id]["total_revenue"] == Decimal("0.00")


@pytest.mark.asyncio
@pytest.mark.parametrize("match_id", [-1, 0, 2**40])
async def test_out_of_range_match_id_is_not_found(db_session, match_id):
    with pytest.raises(NotFound):
        await booking_service.create_booking(db_session, make_request(match_id))


@pytest.mark.asyncio
async def test_other_integrity_errors_are_not_retried(db_session, test_match, monkeypatch):
    """Only a booking_reference collision earns a fresh reference."""
    match_id = test_match.id
    error = IntegrityError(
        "INSERT INTO bookings",
        {},
        Exception("CHECK constraint failed: check_booking_quantity_range"),
    )
    calls = []
    real_generate = booking_service.generate_reference

    def counting_generate():
        calls.append(1)
        return real_generate()

    async def failing_flush(*args, **kwargs):
        raise error

    monkeypatch.setattr(booking_service, "generate_reference", counting_generate)
    monkeypatch.setattr(db_session, "flush", failing_flush)

    with pytest.raises(IntegrityError) as exc_info:
        await booking_service.create_booking(db_session, make_request(match_id))
    assert exc_info.value is error
    assert len(calls) == 1

    monkeypatch.undo()
    assert await booking_service.list_all(db_session) == []
