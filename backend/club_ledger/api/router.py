"""
Central API router that aggregates all route modules.
Everything under /admin requires a verified admin identity.
"""

from fastapi import APIRouter, Depends

from club_ledger.api.routes import (
    admin_bookings,
    admin_dashboard,
    admin_revenue,
    admin_settings,
    bookings,
    settings,
)
from club_ledger.core.security import require_admin

admin_router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])
admin_router.include_router(admin_bookings.router)
admin_router.include_router(admin_revenue.router)
admin_router.include_router(admin_settings.router)
admin_router.include_router(admin_dashboard.router)

api_router = APIRouter(prefix="/api")
api_router.include_router(bookings.router)
api_router.include_router(settings.router)
api_router.include_router(admin_router)
