from fastapi import Depends
from fastapi_clerk_auth import ClerkConfig, ClerkHTTPBearer, HTTPAuthorizationCredentials
from supabase import AsyncClient
from app.configs.app_settings import settings
from app.custom_error import ForbiddenError, UserNotFoundError, ValidationError
from app.models.user_models import UserRole
from app.utils.supabase_client_handlers import get_supabase_client
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# clerk_auth_guard reads the "Authorization: Bearer <JWT>" header, verifies the signature against the
# JWKS published by Clerk and hands back the decoded claims. Authorization (who may see the admin
# dashboard, whose earnings are returned) is decided below from the users table, never from the client.

clerk_config = ClerkConfig(jwks_url=settings.CLERK_JWKS_URL)
clerk_auth_guard = ClerkHTTPBearer(config=clerk_config)


async def get_current_clerk_user_id(credentials: Optional[HTTPAuthorizationCredentials] = Depends(clerk_auth_guard)) -> str:
    """Extract clerk user ID from JWT token"""
    if not credentials:
        raise ValidationError("Authentication required")

    # Clerk puts the user ID in the 'sub' claim
    clerk_user_id = credentials.decoded.get("sub")

    if not clerk_user_id:
        raise ValidationError("Invalid token: user ID not found")

    return clerk_user_id


async def require_admin(
    clerk_user_id: str = Depends(get_current_clerk_user_id),
    supabase_client: AsyncClient = Depends(get_supabase_client),
) -> str:
    """Allow the request only for users whose synced role is admin; returns the clerk user id"""
    result = await supabase_client.table("users").select("id, role").eq("clerk_user_id", clerk_user_id).execute()

    if not result.data:
        raise UserNotFoundError()

    if result.data[0].get("role") != UserRole.ADMIN.value:
        logger.warning(f"Non-admin user {clerk_user_id} tried to reach an admin endpoint")
        raise ForbiddenError("Admin access required")

    return clerk_user_id
