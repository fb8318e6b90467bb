from fastapi import APIRouter

from ..core.dependencies import ActiveUser, DatabaseSession
from ..schemas.dashboard import DashboardStats
from ..services.dashboard_service import DashboardService

router = APIRouter()


@router.get("", response_model=DashboardStats)
async def get_dashboard(db: DatabaseSession, current_user: ActiveUser):
    stats = await DashboardService(db).get_stats(current_user)
    return DashboardStats(role=current_user.role, stats=stats)
