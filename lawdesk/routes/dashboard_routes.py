"""
LawDesk - Dashboard Routes
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lawdesk.database import get_db
from lawdesk.auth import require_auth
from lawdesk.dashboard import get_dashboard_stats
from lawdesk.models.user import User
from lawdesk.schemas import DashboardStats


router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_auth),
):
    return await get_dashboard_stats(db)
