from supabase import AsyncClient
from app.models.clerk_webhook_models import ClerkWebhookEvent
from app.models.user_models import UserCreate, UserRole
from app.custom_error import ServerError
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class ClerkWebhookService:
    """Keeps the users table in step with Clerk so ledger joins can show names and emails"""

    def __init__(self, supabase_client: AsyncClient):
        self.supabase_client = supabase_client

    def _get_primary_email(self, user_data: dict) -> Optional[str]:
        """Extract primary email using primary_email_address_id"""
        primary_email_id = user_data.get("primary_email_address_id")
        email_addresses = user_data.get("email_addresses", [])

        for email in email_addresses:
            if email.get("id") == primary_email_id:
                return email.get("email_address")

        # Fallback: first email if primary not found
        if email_addresses:
            return email_addresses[0].get("email_address")

        return None

    def _get_primary_phone(self, user_data: dict) -> Optional[str]:
        primary_phone_id = user_data.get("primary_phone_number_id")
        for phone in user_data.get("phone_numbers", []):
            if phone.get("id") == primary_phone_id:
                return phone.get("phone_number")
        return None

    def _get_role(self, user_data: dict) -> Optional[str]:
        """Role from public metadata (set by admins) first, then the sign-up form's unsafe metadata; admin is never self-assigned"""
        public_role = (user_data.get("public_metadata") or {}).get("role")
        if public_role in {role.value for role in UserRole}:
            return public_role

        signup_role = (user_data.get("unsafe_metadata") or {}).get("role")
        if signup_role in (UserRole.CUSTOMER.value, UserRole.ARTISAN.value):
            return signup_role

        return None

    def _profile_fields(self, user_data: dict) -> dict:
        fields = {
            "email": self._get_primary_email(user_data),
            "first_name": user_data.get("first_name"),
            "last_name": user_data.get("last_name"),
            "phone": self._get_primary_phone(user_data),
            "role": self._get_role(user_data),
        }
        return {key: value for key, value in fields.items() if value is not None}

    # --------------------------------------------------------------------------------------------------------------------

    async def handle_user_created(self, event: ClerkWebhookEvent):
        """Handle user.created webhook event"""
        try:
            user_data = event.data
            clerk_user_id = user_data.get("id")
            user_record = self._profile_fields(user_data)

            if not user_record.get("email"):
                logger.error(f"No email found for user {clerk_user_id}")
                return

            user_record["clerk_user_id"] = clerk_user_id
            user_record.setdefault("role", UserRole.CUSTOMER.value)

            new_user = UserCreate(**user_record)
            result = await self.supabase_client.table("users").insert(new_user.model_dump(mode="json", exclude_none=True)).execute()

            if result.data:
                logger.info(f"✅ User created in Supabase: {clerk_user_id}")
            else:
                logger.error(f"❌ Failed to create user in Supabase: {clerk_user_id}")

        except Exception as e:
            logger.error(f"Error handling user.created webhook: {str(e)}")
            raise ServerError(f"Webhook processing failed: {str(e)}")

    # --------------------------------------------------------------------------------------------------------------------

    async def handle_user_updated(self, event: ClerkWebhookEvent):
        """Handle user.updated webhook event"""
        try:
            user_data = event.data
            clerk_user_id = user_data.get("id")
            update_data = self._profile_fields(user_data)

            if not update_data:
                logger.info(f"Nothing to update for user {clerk_user_id}")
                return

            result = await self.supabase_client.table("users").update(update_data).eq("clerk_user_id", clerk_user_id).execute()

            if result.data:
                logger.info(f"✅ User updated in Supabase: {clerk_user_id}")
            else:
                logger.error(f"❌ Failed to update user in Supabase: {clerk_user_id}")

        except Exception as e:
            logger.error(f"Error handling user.updated webhook: {str(e)}")
            raise ServerError(f"Webhook processing failed: {str(e)}")

    # --------------------------------------------------------------------------------------------------------------------

    async def handle_user_deleted(self, event: ClerkWebhookEvent):
        """Handle user.deleted webhook event"""
        try:
            clerk_user_id = event.data.get("id")

            # payments keep their customer_id; joins render a deleted customer as "Unknown"
            result = await self.supabase_client.table("users").delete().eq("clerk_user_id", clerk_user_id).execute()

            if result.data:
                logger.info(f"✅ User deleted from Supabase: {clerk_user_id}")
            else:
                logger.error(f"❌ Failed to delete user from Supabase: {clerk_user_id}")

        except Exception as e:
            logger.error(f"Error handling user.deleted webhook: {str(e)}")
            raise ServerError(f"Webhook processing failed: {str(e)}")
