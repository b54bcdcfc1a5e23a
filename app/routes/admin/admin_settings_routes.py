from fastapi import APIRouter, Depends
from supabase import AsyncClient
from app.utils.supabase_client_handlers import get_supabase_client
from app.utils.time_utils import Clock, get_clock
from app.utils.user_auth import require_admin
from app.services.admin.admin_settings_services import AdminSettingsService
from app.models.admin.admin_settings_models import (
    CommissionSettingsResponse,
    CommissionSettingsUpdate,
    PlatformSettingsResponse,
    PlatformSettingsUpdate,
)

admin_settings_router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


async def get_admin_settings_service(
    supabase_client: AsyncClient = Depends(get_supabase_client),
    clock: Clock = Depends(get_clock),
) -> AdminSettingsService:
    """Dependency to get AdminSettingsService instance"""
    return AdminSettingsService(supabase_client, clock)


# =====================================
# COMMISSION SETTINGS ENDPOINTS
# =====================================


@admin_settings_router.get("/payments/commission-settings", response_model=CommissionSettingsResponse)
async def get_commission_settings(settings_service: AdminSettingsService = Depends(get_admin_settings_service)):
    return await settings_service.get_commission_settings()


@admin_settings_router.put("/payments/commission-settings", response_model=CommissionSettingsResponse)
async def update_commission_settings(
    request: CommissionSettingsUpdate,
    settings_service: AdminSettingsService = Depends(get_admin_settings_service),
):
    """Update commission percentages (only the fields sent are changed)"""
    return await settings_service.update_commission_settings(request.model_dump(exclude_unset=True))


# =====================================
# PLATFORM SETTINGS ENDPOINTS
# =====================================


@admin_settings_router.get("/settings/platform", response_model=PlatformSettingsResponse)
async def get_platform_settings(settings_service: AdminSettingsService = Depends(get_admin_settings_service)):
    return await settings_service.get_platform_settings()


@admin_settings_router.put("/settings/platform", response_model=PlatformSettingsResponse)
async def update_platform_settings(
    request: PlatformSettingsUpdate,
    settings_service: AdminSettingsService = Depends(get_admin_settings_service),
):
    return await settings_service.update_platform_settings(request.model_dump(exclude_unset=True))
