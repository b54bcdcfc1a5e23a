from fastapi import APIRouter, Request, Depends
from supabase import AsyncClient
from app.utils.supabase_client_handlers import get_supabase_client
from app.services.clerk_webhook_services import ClerkWebhookService
from app.models.clerk_webhook_models import ClerkWebhookEvent, ClerkWebhookResponse
from app.configs.app_settings import settings
from app.custom_error import ServerError, WebhookError
from svix.webhooks import Webhook, WebhookVerificationError
import json
import logging

logger = logging.getLogger(__name__)

clerk_webhook_router = APIRouter(prefix="/clerk", tags=["Webhooks"])


async def get_clerk_webhook_service(supabase_client: AsyncClient = Depends(get_supabase_client)) -> ClerkWebhookService:
    """Dependency to get ClerkWebhookService instance"""
    return ClerkWebhookService(supabase_client)


@clerk_webhook_router.post("/webhooks", response_model=ClerkWebhookResponse)
async def clerk_webhook(request: Request, webhook_service: ClerkWebhookService = Depends(get_clerk_webhook_service)):
    """Sync users (and their roles) from Clerk"""
    if not settings.CLERK_WEBHOOK_SECRET:
        logger.error("CLERK_WEBHOOK_SECRET is not configured")
        raise ServerError("Clerk webhooks are not configured")

    body = await request.body()

    try:
        Webhook(settings.CLERK_WEBHOOK_SECRET).verify(body, dict(request.headers))
    except WebhookVerificationError as e:
        logger.error(f"Webhook verification failed: {str(e)}")
        raise WebhookError("Invalid webhook signature")

    # svix 2.x verify() returns None, so the verified body is parsed here
    event = ClerkWebhookEvent(**json.loads(body))
    logger.info(f"🔔 Received Clerk webhook: {event.type}")

    handlers = {
        "user.created": webhook_service.handle_user_created,
        "user.updated": webhook_service.handle_user_updated,
        "user.deleted": webhook_service.handle_user_deleted,
    }

    handler = handlers.get(event.type)
    if handler is None:
        logger.info(f"Unhandled webhook event type: {event.type}")
        return ClerkWebhookResponse(status="success", event_type=event.type, handled=False)

    await handler(event)
    return ClerkWebhookResponse(status="success", event_type=event.type, handled=True)
