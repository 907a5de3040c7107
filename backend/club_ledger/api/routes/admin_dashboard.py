"""
Admin dashboard: one composed, all-or-nothing read.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import async_sessionmaker

from club_ledger.db.session import get_session_factory
from club_ledger.schemas.common import ApiResponse, ok
from club_ledger.schemas.dashboard import DashboardStats
from club_ledger.services import dashboard_service

router = APIRouter(prefix="/dashboard", tags=["Admin: Dashboard"])


@router.get("/stats", response_model=ApiResponse[DashboardStats])
async def dashboard_stats(session_factory: async_sessionmaker = Depends(get_session_factory)):
    stats = await dashboard_service.get_dashboard_stats(session_factory)
    return ok(DashboardStats.model_validate(stats, from_attributes=True))
