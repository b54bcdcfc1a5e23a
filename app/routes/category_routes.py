from fastapi import APIRouter, Depends, Query
from supabase import AsyncClient
from app.utils.supabase_client_handlers import get_supabase_client
from app.services.category_services import CategoryService
from app.models.category_models import CategoryResponse, PaginatedCategoriesResponse
from app.configs.app_settings import settings

category_router = APIRouter(prefix="/categories", tags=["Categories"])


async def get_category_service(supabase_client: AsyncClient = Depends(get_supabase_client)) -> CategoryService:
    """Dependency to get CategoryService instance"""
    return CategoryService(supabase_client)


#############################################################################################################################################


@category_router.get("", response_model=PaginatedCategoriesResponse)
async def get_categories(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    category_service: CategoryService = Depends(get_category_service),
):
    """Public list of active categories"""
    return await category_service.get_categories(page, limit)


# ------------------------------------------------------------------------------------------------------------------------------------------------------


@category_router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: str,
    category_service: CategoryService = Depends(get_category_service),
):
    return await category_service.get_category(category_id)
