from fastapi import APIRouter, Depends, Query
from supabase import AsyncClient
from app.utils.supabase_client_handlers import get_supabase_client
from app.utils.time_utils import Clock, get_clock
from app.utils.user_auth import require_admin
from app.services.admin.admin_dashboard_services import AdminDashboardService
from app.models.admin.admin_dashboard_models import (
    DashboardStatsResponse,
    PlatformAlert,
    PopularCategory,
    RecentActivityItem,
    RecentBooking,
    TopArtisan,
)
from typing import List

admin_dashboard_router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


async def get_admin_dashboard_service(
    supabase_client: AsyncClient = Depends(get_supabase_client),
    clock: Clock = Depends(get_clock),
) -> AdminDashboardService:
    """Dependency to get AdminDashboardService instance"""
    return AdminDashboardService(supabase_client, clock)


# =====================================
# DASHBOARD ENDPOINTS
# =====================================


@admin_dashboard_router.get("/dashboard/stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats(
    timeframe: str = Query("30days", description="7days | 30days | 90days | 1year"),
    dashboard_service: AdminDashboardService = Depends(get_admin_dashboard_service),
):
    """Artisans, revenue, active bookings and commission, each compared with the previous period"""
    return await dashboard_service.get_dashboard_stats(timeframe)


# --------------------------------------------------------------


@admin_dashboard_router.get("/artisans/top", response_model=List[TopArtisan])
async def get_top_artisans(dashboard_service: AdminDashboardService = Depends(get_admin_dashboard_service)):
    """Top earning artisans over paid bookings"""
    return await dashboard_service.get_top_artisans()


# --------------------------------------------------------------


@admin_dashboard_router.get("/analytics/popular-categories", response_model=List[PopularCategory])
async def get_popular_categories(dashboard_service: AdminDashboardService = Depends(get_admin_dashboard_service)):
    """Most booked services over paid bookings"""
    return await dashboard_service.get_popular_categories()


# --------------------------------------------------------------


@admin_dashboard_router.get("/alerts", response_model=List[PlatformAlert])
async def get_platform_alerts(dashboard_service: AdminDashboardService = Depends(get_admin_dashboard_service)):
    """Stale artisan applications and pending payouts"""
    return await dashboard_service.get_platform_alerts()


# --------------------------------------------------------------


@admin_dashboard_router.get("/bookings/recent", response_model=List[RecentBooking])
async def get_recent_bookings(dashboard_service: AdminDashboardService = Depends(get_admin_dashboard_service)):
    """Ten newest bookings with customer and artisan names"""
    return await dashboard_service.get_recent_bookings()


# --------------------------------------------------------------


@admin_dashboard_router.get("/activities/recent", response_model=List[RecentActivityItem])
async def get_recent_activity(dashboard_service: AdminDashboardService = Depends(get_admin_dashboard_service)):
    """Latest applications and completed bookings"""
    return await dashboard_service.get_recent_activity()
