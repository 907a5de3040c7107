"""
Admin revenue endpoints: manual entries and aggregated reports.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from club_ledger.db.session import get_db
from club_ledger.schemas.common import ApiResponse, ok
from club_ledger.schemas.revenue import (
    MonthlyRevenue,
    RevenueCreate,
    RevenueResponse,
    RevenueSummary,
    RevenueUpdate,
    YearlyRevenueRow,
)
from club_ledger.services import revenue_service

router = APIRouter(prefix="/revenue", tags=["Admin: Revenue"])


@router.get("", response_model=ApiResponse[list[RevenueResponse]])
async def list_revenue(
    source: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    entries = await revenue_service.list_entries(db, source, start_date, end_date)
    return ok(entries)


@router.post("", response_model=ApiResponse[RevenueResponse], status_code=status.HTTP_201_CREATED)
async def add_revenue(body: RevenueCreate, db: AsyncSession = Depends(get_db)):
    entry = await revenue_service.create_entry(
        db,
        source=body.source,
        amount=body.amount,
        description=body.description,
        transaction_date=body.transaction_date,
    )
    return ok(entry, "Revenue recorded successfully")


@router.get("/summary", response_model=ApiResponse[RevenueSummary])
async def revenue_summary(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return ok(await revenue_service.get_summary(db, start_date, end_date))


@router.get("/monthly", response_model=ApiResponse[MonthlyRevenue])
async def monthly_revenue(
    year: str = Query(...),
    month: str = Query(...),
    db: AsyncSession = Depends(get_db),
):
    # Range checks happen in the service so the error names the bounds
    return ok(await revenue_service.get_monthly_revenue(db, year, month))


@router.get("/yearly", response_model=ApiResponse[list[YearlyRevenueRow]])
async def yearly_revenue(year: str = Query(...), db: AsyncSession = Depends(get_db)):
    return ok(await revenue_service.get_yearly_revenue(db, year))


@router.put("/{entry_id}", response_model=ApiResponse[RevenueResponse])
async def update_revenue(entry_id: int, body: RevenueUpdate, db: AsyncSession = Depends(get_db)):
    entry = await revenue_service.update_entry(
        db,
        entry_id,
        source=body.source,
        amount=body.amount,
        description=body.description,
        transaction_date=body.transaction_date,
    )
    return ok(entry, "Revenue record updated")


@router.delete("/{entry_id}", response_model=ApiResponse[None])
async def delete_revenue(entry_id: int, db: AsyncSession = Depends(get_db)):
    await revenue_service.delete_entry(db, entry_id)
    return ok(message="Revenue record deleted successfully")
