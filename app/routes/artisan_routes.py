from fastapi import APIRouter, Depends
from supabase import AsyncClient
from app.utils.supabase_client_handlers import get_supabase_client
from app.utils.user_auth import get_current_clerk_user_id
from app.services.artisan_services import ArtisanProfileService
from app.models.artisan_models import ArtisanApplication, ArtisanProfileResponse, ArtisanProfileUpdate, AvailabilityUpdate

artisan_router = APIRouter(prefix="/artisans", tags=["Artisans"])


async def get_artisan_profile_service(supabase_client: AsyncClient = Depends(get_supabase_client)) -> ArtisanProfileService:
    """Dependency to get ArtisanProfileService instance"""
    return ArtisanProfileService(supabase_client=supabase_client)


#############################################################################################################################################


@artisan_router.post("/apply", response_model=ArtisanProfileResponse)
async def apply_as_artisan(
    application: ArtisanApplication,
    clerk_user_id: str = Depends(get_current_clerk_user_id),
    artisan_profile_service: ArtisanProfileService = Depends(get_artisan_profile_service),
):
    """Submit an artisan application (portfolio and certifications as hosted file URLs)"""
    return await artisan_profile_service.apply(clerk_user_id, application)


# ------------------------------------------------------------------------------------------------------------------------------------------------------


@artisan_router.get("/me", response_model=ArtisanProfileResponse)
async def get_my_profile(
    clerk_user_id: str = Depends(get_current_clerk_user_id),
    artisan_profile_service: ArtisanProfileService = Depends(get_artisan_profile_service),
):
    return await artisan_profile_service.get_my_profile(clerk_user_id)


# ------------------------------------------------------------------------------------------------------------------------------------------------------


@artisan_router.patch("/me", response_model=ArtisanProfileResponse)
async def update_my_profile(
    profile_update: ArtisanProfileUpdate,
    clerk_user_id: str = Depends(get_current_clerk_user_id),
    artisan_profile_service: ArtisanProfileService = Depends(get_artisan_profile_service),
):
    """Update only the fields sent"""
    return await artisan_profile_service.update_my_profile(clerk_user_id, profile_update)


# ------------------------------------------------------------------------------------------------------------------------------------------------------


@artisan_router.patch("/me/availability", response_model=ArtisanProfileResponse)
async def update_my_availability(
    request: AvailabilityUpdate,
    clerk_user_id: str = Depends(get_current_clerk_user_id),
    artisan_profile_service: ArtisanProfileService = Depends(get_artisan_profile_service),
):
    return await artisan_profile_service.update_availability(clerk_user_id, request.is_available)
