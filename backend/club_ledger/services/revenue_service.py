"""
Revenue aggregator over manually recorded income.

ROUNDING
========

Entries keep four decimal places. Reports sum the raw amounts in SQL and round
each aggregate exactly once (half-up to cents):

    [tickets 100.005, tickets 50.005]  ->  tickets total 150.01
                                           (not 100.01 + 50.01 = 150.02)

The grand total is the sum of the unrounded per-source totals, rounded once.
Reports are computed on read and never cached, so editing an entry cannot
leave a stale report behind.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from club_ledger.core.exceptions import NotFound, ValidationFailed
from club_ledger.core.logging import get_logger
from club_ledger.core.metrics import record_revenue_entry
from club_ledger.core.normalize import round_money, to_date, to_decimal
from club_ledger.models.revenue import REVENUE_SOURCES, RevenueEntry

logger = get_logger(__name__)

AMOUNT_PLACES = 4
# revenue.amount is Numeric(12,4)
MAX_AMOUNT = Decimal("99999999.9999")
MIN_YEAR, MAX_YEAR = 1970, 3000


# ---------- validation ----------

def _validate_source(source: Any) -> str:
    s = "" if source is None else str(source).strip()
    if s not in REVENUE_SOURCES:
        raise ValidationFailed(
            f"Invalid revenue source. Allowed: {', '.join(REVENUE_SOURCES)}",
            field="source",
            allowed=REVENUE_SOURCES,
        )
    return s


def _validate_amount(amount: Any) -> Decimal:
    value = to_decimal(amount, places=AMOUNT_PLACES, field="amount")
    if value <= 0:
        raise ValidationFailed("Amount must be a positive number", field="amount")
    if value > MAX_AMOUNT:
        raise ValidationFailed(f"Amount must not exceed {MAX_AMOUNT}", field="amount")
    return value


def _clean_description(description: Any) -> Optional[str]:
    if description is None:
        return None
    return str(description).strip() or None


def _validate_year(year: Any) -> int:
    try:
        y = int(year)
    except (TypeError, ValueError):
        raise ValidationFailed("Invalid year", field="year") from None
    if not MIN_YEAR <= y <= MAX_YEAR:
        raise ValidationFailed(f"Year must be between {MIN_YEAR} and {MAX_YEAR}", field="year")
    return y


def _validate_month(month: Any) -> int:
    try:
        m = int(month)
    except (TypeError, ValueError):
        raise ValidationFailed("Invalid month", field="month") from None
    if not 1 <= m <= 12:
        raise ValidationFailed("Month must be between 1 and 12", field="month")
    return m


def _date_range(start_date: Any, end_date: Any) -> Optional[tuple[date, date]]:
    if start_date is None and end_date is None:
        return None
    if start_date is None or end_date is None:
        raise ValidationFailed("Provide both start_date and end_date when filtering")
    start = to_date(start_date, field="start_date")
    end = to_date(end_date, field="end_date")
    if start > end:
        raise ValidationFailed("start_date must not be after end_date", field="start_date")
    return start, end


# ---------- CRUD ----------

async def list_entries(
    db: AsyncSession,
    source: Optional[str] = None,
    start_date: Any = None,
    end_date: Any = None,
) -> list[RevenueEntry]:
    query = select(RevenueEntry)
    if source is not None:
        query = query.where(RevenueEntry.source == _validate_source(source))
    window = _date_range(start_date, end_date)
    if window:
        query = query.where(RevenueEntry.transaction_date.between(*window))

    result = await db.execute(
        query.order_by(RevenueEntry.transaction_date.desc(), RevenueEntry.id.desc())
    )
    return list(result.scalars().all())


async def get_entry(db: AsyncSession, entry_id: int) -> RevenueEntry:
    result = await db.execute(select(RevenueEntry).where(RevenueEntry.id == entry_id))
    entry = result.scalar_one_or_none()
    if not entry:
        raise NotFound(f"Revenue record {entry_id} not found")
    return entry


async def create_entry(
    db: AsyncSession,
    source: Any,
    amount: Any,
    description: Any = None,
    transaction_date: Any = None,
) -> RevenueEntry:
    """transaction_date defaults to today."""
    entry = RevenueEntry(
        source=_validate_source(source),
        amount=_validate_amount(amount),
        description=_clean_description(description),
        transaction_date=(
            to_date(transaction_date, field="transaction_date")
            if transaction_date not in (None, "")
            else date.today()
        ),
    )
    db.add(entry)
    await db.flush()
    await db.refresh(entry)

    record_revenue_entry("create")
    logger.info(
        "revenue_recorded",
        revenue_id=entry.id,
        source=entry.source,
        amount=str(entry.amount),
        transaction_date=entry.transaction_date.isoformat(),
    )
    return entry


async def update_entry(
    db: AsyncSession,
    entry_id: int,
    source: Any,
    amount: Any,
    description: Any = None,
    transaction_date: Any = None,
) -> RevenueEntry:
    validated_source = _validate_source(source)
    validated_amount = _validate_amount(amount)
    validated_date = to_date(transaction_date, field="transaction_date")

    entry = await get_entry(db, entry_id)
    entry.source = validated_source
    entry.amount = validated_amount
    entry.description = _clean_description(description)
    entry.transaction_date = validated_date
    await db.flush()
    await db.refresh(entry)

    record_revenue_entry("update")
    logger.info("revenue_updated", revenue_id=entry.id, source=entry.source, amount=str(entry.amount))
    return entry


async def delete_entry(db: AsyncSession, entry_id: int) -> None:
    entry = await get_entry(db, entry_id)
    await db.delete(entry)
    await db.flush()
    record_revenue_entry("delete")
    logger.info("revenue_deleted", revenue_id=entry_id)


# ---------- reports ----------

async def _breakdown(db: AsyncSession, *conditions) -> tuple[list[dict], Decimal]:
    """Per-source totals and counts plus the grand total, each rounded once."""
    total_amount = func.sum(RevenueEntry.amount).label("total_amount")
    query = select(
        RevenueEntry.source,
        total_amount,
        func.count(RevenueEntry.id).label("transaction_count"),
    )
    if conditions:
        query = query.where(*conditions)
    result = await db.execute(
        query.group_by(RevenueEntry.source).order_by(total_amount.desc())
    )

    breakdown = []
    grand_total = Decimal("0")
    for row in result:
        raw = Decimal(str(row.total_amount or 0))
        grand_total += raw
        breakdown.append(
            {
                "source": row.source,
                "total_amount": round_money(raw),
                "transaction_count": int(row.transaction_count or 0),
            }
        )
    return breakdown, round_money(grand_total)


async def get_summary(db: AsyncSession, start_date: Any = None, end_date: Any = None) -> dict:
    window = _date_range(start_date, end_date)
    conditions = [RevenueEntry.transaction_date.between(*window)] if window else []
    breakdown, total = await _breakdown(db, *conditions)
    return {
        "range": {"start_date": window[0], "end_date": window[1]} if window else None,
        "breakdown": breakdown,
        "total_revenue": total,
    }


async def get_monthly_revenue(db: AsyncSession, year: Any, month: Any) -> dict:
    y = _validate_year(year)
    m = _validate_month(month)
    breakdown, total = await _breakdown(
        db,
        extract("year", RevenueEntry.transaction_date) == y,
        extract("month", RevenueEntry.transaction_date) == m,
    )
    return {"year": y, "month": m, "breakdown": breakdown, "total_revenue": total}


async def get_yearly_revenue(db: AsyncSession, year: Any) -> list[dict]:
    y = _validate_year(year)
    month_col = extract("month", RevenueEntry.transaction_date).label("month")
    result = await db.execute(
        select(
            month_col,
            RevenueEntry.source,
            func.sum(RevenueEntry.amount).label("total_amount"),
            func.count(RevenueEntry.id).label("transaction_count"),
        )
        .where(extract("year", RevenueEntry.transaction_date) == y)
        .group_by(month_col, RevenueEntry.source)
        .order_by(month_col.asc(), RevenueEntry.source.asc())
    )
    return [
        {
            "month": int(row.month),
            "source": row.source,
            "total_amount": round_money(Decimal(str(row.total_amount or 0))),
            "transaction_count": int(row.transaction_count or 0),
        }
        for row in result
    ]


async def get_total(db: AsyncSession) -> Decimal:
    result = await db.execute(select(func.sum(RevenueEntry.amount)))
    return round_money(Decimal(str(result.scalar() or 0)))
