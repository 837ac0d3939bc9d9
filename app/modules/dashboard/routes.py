from fastapi import APIRouter, Depends
from app.core.dependencies import RequestContext, get_request_context
from app.modules.dashboard.schemas import DashboardStatsResponse
from app.modules.dashboard.service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def get_dashboard_service(ctx: RequestContext = Depends(get_request_context)) -> DashboardService:
    return DashboardService(ctx)


@router.get("/stats", response_model=DashboardStatsResponse)
async def dashboard_stats(service: DashboardService = Depends(get_dashboard_service)):
    """Row counts across the app's resource tables, queried concurrently"""
    return await service.get_stats()
