from supabase import AsyncClient
from app.models.artisan_models import (
    ArtisanApplication,
    ArtisanProfileResponse,
    ArtisanProfileUpdate,
    ArtisanStatus,
)
from app.models.user_models import UserRole
from app.custom_error import NotFoundError, ServerError, UserNotFoundError, ValidationError
import logging

logger = logging.getLogger(__name__)


class ArtisanProfileService:
    """Artisan applications and the signed in artisan's own profile"""

    def __init__(self, supabase_client: AsyncClient):
        self.supabase_client = supabase_client

    async def _get_user_id(self, clerk_user_id: str) -> str:
        """Helper method to get user_id from clerk_user_id"""
        try:
            result = await self.supabase_client.table("users").select("id").eq("clerk_user_id", clerk_user_id).execute()

            if not result.data:
                raise UserNotFoundError()

            return result.data[0]["id"]
        except Exception as e:
            logger.error(f"Error getting user_id - {str(e)}")
            if isinstance(e, UserNotFoundError):
                raise e
            raise ServerError("Failed to get user id")

    async def _get_profile_row(self, user_id: str) -> dict:
        result = await self.supabase_client.table("artisans").select("*").eq("user_id", user_id).execute()
        if not result.data:
            raise NotFoundError("Artisan profile not found")
        return result.data[0]

    async def _resolve_category_id(self, category_name: str) -> str:
        """Only active categories accept new artisans"""
        result = await self.supabase_client.table("categories").select("id, is_active").eq("name", category_name).execute()
        if not result.data or not result.data[0].get("is_active", True):
            raise NotFoundError("Category not found or inactive")
        return result.data[0]["id"]

    async def _to_response(self, profile_row: dict) -> ArtisanProfileResponse:
        category_name = "Not specified"
        if profile_row.get("category_id"):
            result = await self.supabase_client.table("categories").select("name").eq("id", profile_row["category_id"]).execute()
            if result.data:
                category_name = result.data[0]["name"]
        return ArtisanProfileResponse(**profile_row, category=category_name)

    # =====================================================================================================
    # APPLICATION
    # =====================================================================================================

    async def apply(self, clerk_user_id: str, application: ArtisanApplication) -> ArtisanProfileResponse:
        """File an artisan application for the signed in user; it waits in the admin queue as pending"""
        try:
            user_id = await self._get_user_id(clerk_user_id)

            existing = await self.supabase_client.table("artisans").select("id").eq("user_id", user_id).execute()
            if existing.data:
                raise ValidationError("Artisan application already submitted")

            category_id = await self._resolve_category_id(application.category)

            profile_record = application.model_dump(mode="json", exclude={"category"})
            profile_record.update(
                {
                    "user_id": user_id,
                    "category_id": category_id,
                    "status": ArtisanStatus.PENDING.value,
                    "is_available": True,
                }
            )
            result = await self.supabase_client.table("artisans").insert(profile_record).execute()
            if not result.data:
                raise ServerError("Failed to save artisan application")

            # customers become artisans; an admin keeps the admin role
            await (
                self.supabase_client.table("users")
                .update({"role": UserRole.ARTISAN.value})
                .eq("id", user_id)
                .eq("role", UserRole.CUSTOMER.value)
                .execute()
            )

            logger.info(f"✅ Artisan application submitted for user {user_id}")
            return await self._to_response(result.data[0])

        except Exception as e:
            logger.error(f"Error in apply: {str(e)}")
            if isinstance(e, (UserNotFoundError, NotFoundError, ValidationError, ServerError)):
                raise e
            raise ServerError(f"Server operation failed: {str(e)}")

    # =====================================================================================================
    # OWN PROFILE
    # =====================================================================================================

    async def get_my_profile(self, clerk_user_id: str) -> ArtisanProfileResponse:
        try:
            user_id = await self._get_user_id(clerk_user_id)
            return await self._to_response(await self._get_profile_row(user_id))

        except Exception as e:
            logger.error(f"Error in get_my_profile: {str(e)}")
            if isinstance(e, (UserNotFoundError, NotFoundError)):
                raise e
            raise ServerError(f"Server operation failed: {str(e)}")

    # -------------------------------------------------------------------------------------------------------------------------------

    async def update_my_profile(self, clerk_user_id: str, profile_update: ArtisanProfileUpdate) -> ArtisanProfileResponse:
        """Partial update of the descriptive fields; status and category are not editable here"""
        try:
            user_id = await self._get_user_id(clerk_user_id)
            profile_row = await self._get_profile_row(user_id)

            update_record = profile_update.model_dump(mode="json", exclude_unset=True, exclude_none=True)
            if not update_record:
                return await self._to_response(profile_row)

            result = await self.supabase_client.table("artisans").update(update_record).eq("id", profile_row["id"]).execute()
            if not result.data:
                raise NotFoundError("Artisan profile not found")

            logger.info(f"✅ Artisan profile {profile_row['id']} updated: {', '.join(update_record)}")
            return await self._to_response(result.data[0])

        except Exception as e:
            logger.error(f"Error in update_my_profile: {str(e)}")
            if isinstance(e, (UserNotFoundError, NotFoundError)):
                raise e
            raise ServerError(f"Server operation failed: {str(e)}")

    # -------------------------------------------------------------------------------------------------------------------------------

    async def update_availability(self, clerk_user_id: str, is_available: bool) -> ArtisanProfileResponse:
        """Unavailable artisans cannot be booked"""
        try:
            user_id = await self._get_user_id(clerk_user_id)

            result = await self.supabase_client.table("artisans").update({"is_available": is_available}).eq("user_id", user_id).execute()
            if not result.data:
                raise NotFoundError("Artisan profile not found")

            logger.info(f"✅ Artisan {result.data[0]['id']} availability set to {is_available}")
            return await self._to_response(result.data[0])

        except Exception as e:
            logger.error(f"Error in update_availability: {str(e)}")
            if isinstance(e, (UserNotFoundError, NotFoundError)):
                raise e
            raise ServerError(f"Server operation failed: {str(e)}")
