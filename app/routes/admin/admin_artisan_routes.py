from fastapi import APIRouter, Depends, Query
from supabase import AsyncClient
from app.utils.supabase_client_handlers import get_supabase_client
from app.utils.user_auth import require_admin
from app.services.admin.admin_artisan_services import AdminArtisanService
from app.models.admin.admin_artisan_models import PaginatedPendingArtisansResponse
from app.models.artisan_models import ArtisanProfile
from app.configs.app_settings import settings

admin_artisan_router = APIRouter(prefix="/admin/artisans", tags=["Admin"], dependencies=[Depends(require_admin)])


async def get_admin_artisan_service(supabase_client: AsyncClient = Depends(get_supabase_client)) -> AdminArtisanService:
    """Dependency to get AdminArtisanService instance"""
    return AdminArtisanService(supabase_client)


# =====================================
# ARTISAN APPLICATION ENDPOINTS
# =====================================


@admin_artisan_router.get("/pending", response_model=PaginatedPendingArtisansResponse)
async def get_pending_artisans(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100, description="Items per page"),
    artisan_service: AdminArtisanService = Depends(get_admin_artisan_service),
):
    """Applications waiting for review"""
    return await artisan_service.get_pending_artisans(page, limit)


# --------------------------------------------------------------


@admin_artisan_router.put("/{artisan_id}/approve", response_model=ArtisanProfile)
async def approve_artisan(artisan_id: str, artisan_service: AdminArtisanService = Depends(get_admin_artisan_service)):
    """Approve an artisan application"""
    return await artisan_service.approve_artisan(artisan_id)


# --------------------------------------------------------------


@admin_artisan_router.put("/{artisan_id}/reject", response_model=ArtisanProfile)
async def reject_artisan(artisan_id: str, artisan_service: AdminArtisanService = Depends(get_admin_artisan_service)):
    """Reject an artisan application"""
    return await artisan_service.reject_artisan(artisan_id)
