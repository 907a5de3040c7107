"""
Configuration store: key/value settings backing ticket prices, the membership
fee and club metadata.

ATOMIC MULTI-KEY WRITES
=======================

Ticket prices (vip/regular/student) always change together. A partial write
would let a purchase price one ticket type against an inconsistent set, so
set_many() works like this:

  1. Validate every key before touching the database
  2. Upsert every row inside the request transaction
  3. On any failure roll the whole transaction back and raise StorageFault

The database is the source of truth. There is deliberately no in-process or
Redis cache of prices: a booking must always be priced from the committed
values.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from club_ledger.core.exceptions import NotFound, PricingUnavailable, StorageFault, ValidationFailed
from club_ledger.core.logging import get_logger
from club_ledger.core.metrics import record_settings_update
from club_ledger.models.setting import Setting

logger = get_logger(__name__)

MAX_KEY_LENGTH = 100
# 50 tickets at this price still fit bookings.total_amount Numeric(10,2)
MAX_AMOUNT = 1_000_000

TICKET_PRICE_KEYS = {
    "vip": "ticket_price_vip",
    "regular": "ticket_price_regular",
    "student": "ticket_price_student",
}
MEMBERSHIP_FEE_KEY = "membership_fee"
CLUB_INFO_KEYS = (
    "club_name",
    "club_slogan",
    "club_nickname",
    "club_location",
    "club_email",
    "club_phone",
)

DEFAULT_SETTINGS = {
    "ticket_price_vip": "20",
    "ticket_price_regular": "10",
    "ticket_price_student": "5",
    "membership_fee": "50",
    "club_name": "FC Inkiwanjani",
    "club_slogan": "The Pride of Mile 46",
    "club_nickname": "The Wolves",
    "club_location": "Mile 46, Nakuru County",
    "club_email": "info@fcinkiwanjani.com",
    "club_phone": "+254 700 000 000",
}


# ---------- helpers ----------

def _clean_value(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _ensure_key(key: Any) -> str:
    k = _clean_value(key)
    if not k:
        raise ValidationFailed("Setting key is required", field="setting_key")
    if len(k) > MAX_KEY_LENGTH:
        raise ValidationFailed(
            f"Setting key must be at most {MAX_KEY_LENGTH} characters", field="setting_key"
        )
    return k


def _ensure_keys(keys: Iterable[Any]) -> list[str]:
    # de-dupe, keep order
    return list(dict.fromkeys(_ensure_key(k) for k in keys))


def _parse_amount(value: Any) -> Optional[int]:
    """Whole, non-negative amount no larger than MAX_AMOUNT, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not number.is_finite() or number < 0 or number > MAX_AMOUNT:
        return None
    if number != number.to_integral_value():
        return None
    return int(number)


def _to_non_negative_int(value: Any, field: str) -> int:
    number = _parse_amount(value)
    if number is None:
        raise ValidationFailed(
            f"{field} must be a non-negative integer not above {MAX_AMOUNT}", field=field
        )
    return number


def _stored_amount_or_zero(value: Optional[str]) -> int:
    # Same parse as get_unit_price: a value shown here is the value charged
    number = _parse_amount(value)
    return 0 if number is None else number


# ---------- core ----------

async def get_value(db: AsyncSession, key: str) -> str:
    k = _ensure_key(key)
    result = await db.execute(select(Setting.setting_value).where(Setting.setting_key == k))
    value = result.scalar_one_or_none()
    if value is None:
        raise NotFound(f"Setting '{k}' not found")
    return value


async def get_many(db: AsyncSession, keys: Iterable[str]) -> dict[str, str]:
    ks = _ensure_keys(keys)
    if not ks:
        return {}
    result = await db.execute(
        select(Setting.setting_key, Setting.setting_value).where(Setting.setting_key.in_(ks))
    )
    return {row.setting_key: row.setting_value for row in result}


async def get_all(db: AsyncSession) -> dict[str, str]:
    result = await db.execute(
        select(Setting.setting_key, Setting.setting_value).order_by(Setting.setting_key)
    )
    return {row.setting_key: row.setting_value for row in result}


async def _upsert(db: AsyncSession, entries: list[tuple[str, str]]) -> None:
    keys = [k for k, _ in entries]
    result = await db.execute(select(Setting).where(Setting.setting_key.in_(keys)))
    existing = {row.setting_key: row for row in result.scalars()}

    for key, value in entries:
        row = existing.get(key)
        if row is None:
            db.add(Setting(setting_key=key, setting_value=value))
        else:
            row.setting_value = value
    await db.flush()


async def set_many(db: AsyncSession, entries: Mapping[str, Any]) -> dict[str, str]:
    """Write every entry or none of them."""
    if not isinstance(entries, Mapping):
        raise ValidationFailed("Settings object is required")

    cleaned = [(_ensure_key(k), _clean_value(v)) for k, v in entries.items()]
    if not cleaned:
        return {}

    try:
        await _upsert(db, cleaned)
    except SQLAlchemyError as e:
        await db.rollback()
        record_settings_update(committed=False)
        logger.error("settings_update_failed", keys=[k for k, _ in cleaned], error=str(e))
        raise StorageFault("Failed to update settings") from e

    record_settings_update(committed=True)
    logger.info("settings_updated", keys=[k for k, _ in cleaned])
    return dict(cleaned)


async def set_value(db: AsyncSession, key: str, value: Any) -> dict[str, str]:
    k = _ensure_key(key)
    await set_many(db, {k: value})
    return {"key": k, "value": _clean_value(value)}


async def delete_key(db: AsyncSession, key: str) -> None:
    k = _ensure_key(key)
    result = await db.execute(delete(Setting).where(Setting.setting_key == k))
    if result.rowcount == 0:
        raise NotFound(f"Setting '{k}' not found")
    logger.warning("setting_deleted", key=k)


async def seed_defaults(db: AsyncSession) -> None:
    """Insert default settings that are missing; existing values are kept."""
    present = await get_many(db, DEFAULT_SETTINGS.keys())
    missing = {k: v for k, v in DEFAULT_SETTINGS.items() if k not in present}
    if missing:
        await set_many(db, missing)


# ---------- domain helpers ----------

async def get_ticket_prices(db: AsyncSession) -> dict[str, int]:
    """Display prices; absent keys read as 0. Booking never uses this."""
    stored = await get_many(db, TICKET_PRICE_KEYS.values())
    return {
        ticket_type: _stored_amount_or_zero(stored.get(key))
        for ticket_type, key in TICKET_PRICE_KEYS.items()
    }


async def set_ticket_prices(db: AsyncSession, prices: Mapping[str, Any]) -> dict[str, int]:
    if not isinstance(prices, Mapping):
        raise ValidationFailed("Ticket prices are required")

    validated = {
        ticket_type: _to_non_negative_int(prices.get(ticket_type), ticket_type)
        for ticket_type in TICKET_PRICE_KEYS
    }
    await set_many(
        db,
        {TICKET_PRICE_KEYS[t]: str(price) for t, price in validated.items()},
    )
    return validated


async def get_unit_price(db: AsyncSession, ticket_type: str) -> Decimal:
    """
    Strict price lookup for booking creation. A missing or malformed price
    (anything set_ticket_prices would reject) is a server misconfiguration:
    never fall back to zero.
    """
    key = TICKET_PRICE_KEYS.get(ticket_type)
    if key is None:
        raise ValidationFailed(
            "Invalid ticket type", field="ticket_type", allowed=TICKET_PRICE_KEYS.keys()
        )

    stored = await get_many(db, [key])
    raw = stored.get(key)
    price = _parse_amount(raw)
    if price is None:
        logger.error("ticket_price_unavailable", ticket_type=ticket_type, key=key, value=raw)
        raise PricingUnavailable(f"Ticket price for '{ticket_type}' is not configured")
    return Decimal(price)


async def get_membership_fee(db: AsyncSession) -> int:
    stored = await get_many(db, [MEMBERSHIP_FEE_KEY])
    return _stored_amount_or_zero(stored.get(MEMBERSHIP_FEE_KEY))


async def set_membership_fee(db: AsyncSession, fee: Any) -> int:
    value = _to_non_negative_int(fee, "membership_fee")
    await set_many(db, {MEMBERSHIP_FEE_KEY: str(value)})
    return value


async def get_club_info(db: AsyncSession) -> dict[str, str]:
    return await get_many(db, CLUB_INFO_KEYS)


async def set_club_info(db: AsyncSession, info: Mapping[str, Any]) -> dict[str, str]:
    """Accepts both club_* keys and the short names the admin console sends."""
    updates = {}
    for key in CLUB_INFO_KEYS:
        short = key.removeprefix("club_")
        value = info.get(key) or info.get(short)
        if value:
            updates[key] = _clean_value(value)

    if not updates:
        raise ValidationFailed("No valid club info fields provided", allowed=CLUB_INFO_KEYS)
    return await set_many(db, updates)
