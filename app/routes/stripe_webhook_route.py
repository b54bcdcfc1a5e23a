from fastapi import APIRouter, Request, Depends
from supabase import AsyncClient
import stripe
import logging
from app.utils.supabase_client_handlers import get_supabase_client
from app.utils.time_utils import Clock, get_clock
from app.services.payment_mgnt_services import PaymentService
from app.models.stripe_webhook_models import StripeWebhookEventResponse
from app.configs.stripe_config import StripeConfig
from app.custom_error import NotFoundError, ServerError, ValidationError, WebhookError

stripe_webhook_router = APIRouter(prefix="/stripe", tags=["Webhooks"])
logger = logging.getLogger(__name__)

PAYMENT_SUCCEEDED_EVENTS = ("checkout.session.completed",)
PAYMENT_FAILED_EVENTS = ("checkout.session.expired", "payment_intent.payment_failed")


async def get_payment_service(
    supabase_client: AsyncClient = Depends(get_supabase_client),
    clock: Clock = Depends(get_clock),
) -> PaymentService:
    """Dependency to get PaymentService instance"""
    return PaymentService(supabase_client, clock)


# ################################################################################################################################


@stripe_webhook_router.post("/webhooks", response_model=StripeWebhookEventResponse)
async def stripe_webhook_handler(request: Request, payment_service: PaymentService = Depends(get_payment_service)):
    """Settle booking payments from Stripe checkout events"""
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")

    if not sig_header:
        raise WebhookError("Missing stripe-signature header")

    try:
        event = StripeConfig.construct_webhook_event(payload, sig_header)
    except ValueError:
        raise WebhookError("Invalid payload")
    except stripe.SignatureVerificationError:
        raise WebhookError("Invalid signature")

    event_type = event["type"]
    logger.info(f"🔔 Received Stripe webhook: {event_type}")

    if event_type not in PAYMENT_SUCCEEDED_EVENTS + PAYMENT_FAILED_EVENTS:
        logger.info(f"⚠️ Unhandled webhook event type: {event_type}")
        return StripeWebhookEventResponse(status="success", message=f"Event type {event_type} not handled", event_type=event_type)

    stripe_object = event["data"]["object"]
    payment_id = (stripe_object.get("metadata") or {}).get("payment_id")

    try:
        if not payment_id:
            raise ValidationError("Missing payment_id in event metadata")

        if event_type in PAYMENT_SUCCEEDED_EVENTS:
            settled = await payment_service.mark_payment_paid(payment_id, stripe_object.get("payment_intent"))
            outcome = "marked paid"
        else:
            settled = await payment_service.mark_payment_failed(payment_id)
            outcome = "marked failed"

    except (NotFoundError, ValidationError) as e:
        # acknowledged so Stripe stops retrying an event that can never match a booking
        logger.warning(f"⚠️ Stripe event {event_type} ignored: {e.detail}")
        return StripeWebhookEventResponse(status="ignored", message=str(e.detail), event_type=event_type, payment_id=payment_id)
    except Exception as e:
        logger.error(f"❌ Unexpected webhook error: {str(e)}")
        raise ServerError("Webhook processing failed")

    message = f"Payment {payment_id} {outcome}" if settled else f"Payment {payment_id} already settled"
    return StripeWebhookEventResponse(status="success", message=message, event_type=event_type, payment_id=payment_id, processed=settled)
