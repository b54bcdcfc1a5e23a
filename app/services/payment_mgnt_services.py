from supabase import AsyncClient
from app.configs.stripe_config import StripeConfig, PaymentConstants, to_cents
from app.configs.app_settings import settings
from app.models.artisan_models import ArtisanStatus
from app.models.payment_models import (
    BookingCreate,
    BookingStatus,
    CheckoutSessionResponse,
    PaymentRecord,
    PaymentStatus,
    PayoutStatus,
    ReviewCreate,
)
from app.services.admin.admin_settings_services import AdminSettingsService
from app.services.commission_calculator import compute_booking_amounts, to_decimal
from app.custom_error import DatabaseError, ForbiddenError, NotFoundError, ServerError, UserNotFoundError, ValidationError
from app.utils.identifiers import validate_record_id
from app.utils.time_utils import Clock, to_iso, utc_now
from typing import Dict, Optional, Set
import logging

logger = logging.getLogger(__name__)

# booking status moves allowed from each state; completed and cancelled are terminal
BOOKING_TRANSITIONS: Dict[BookingStatus, Set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED},
    BookingStatus.IN_PROGRESS: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.CANCELLED: set(),
}


class PaymentService:
    def __init__(self, supabase_client: AsyncClient, clock: Clock = utc_now):
        self.supabase_client = supabase_client
        self.clock = clock

    # ######################################################################################################################
    # Helper methods:
    # ######################################################################################################################

    async def _get_user(self, clerk_user_id: str) -> dict:
        result = await self.supabase_client.table("users").select("*").eq("clerk_user_id", clerk_user_id).execute()
        if not result.data:
            raise UserNotFoundError()
        return result.data[0]

    async def _get_payment(self, payment_id: str) -> dict:
        payment_id = validate_record_id(payment_id, "payment")
        result = await self.supabase_client.table("payments").select("*").eq("id", payment_id).execute()
        if not result.data:
            raise NotFoundError("Payment not found")
        return result.data[0]

    # ---------------------------------------------------------------------------------------------------------------------

    async def create_booking(self, clerk_user_id: str, booking: BookingCreate) -> PaymentRecord:
        """Price a booking with the current commission rate and record it as pending / unpaid"""
        try:
            customer = await self._get_user(clerk_user_id)
            artisan_id = validate_record_id(booking.artisan_id, "artisan")

            artisan_result = await self.supabase_client.table("artisans").select("*").eq("id", artisan_id).execute()
            if not artisan_result.data:
                raise NotFoundError("Artisan not found")

            artisan = artisan_result.data[0]
            if artisan.get("status") != ArtisanStatus.APPROVED.value or not artisan.get("is_available", True):
                raise ValidationError("Artisan is not accepting bookings")

            commission_rate = await AdminSettingsService(self.supabase_client, self.clock).get_default_commission_rate()
            amounts = compute_booking_amounts(
                hourly_rate=to_decimal(artisan.get("hourly_rate")),
                hours=booking.hours,
                commission_rate=commission_rate,
                tax_rate=settings.TAX_RATE_PERCENT,
            )

            payment_record = {
                "customer_id": customer["id"],
                "artisan_id": artisan_id,
                "service": booking.service,
                "date": booking.date,
                "time": booking.time,
                "duration": f"{booking.hours} hours",
                "location": booking.location,
                **{column: str(amount) for column, amount in amounts.items()},
                "status": BookingStatus.PENDING.value,
                "payment_status": PaymentStatus.PENDING.value,
                "payout_status": PayoutStatus.PENDING.value,
                "payment_method": booking.payment_method.value,
                "created_at": to_iso(self.clock()),
            }

            result = await self.supabase_client.table("payments").insert(payment_record).execute()
            if not result.data:
                raise DatabaseError("Failed to create booking")

            logger.info(f"✅ Booking {result.data[0]['id']} created, total {amounts['total']}, fee {amounts['platform_fee']}")
            return PaymentRecord(**result.data[0])

        except Exception as e:
            logger.error(f"Error creating booking: {str(e)}")
            if isinstance(e, (UserNotFoundError, NotFoundError, ValidationError, DatabaseError)):
                raise e
            raise ServerError(f"Failed to create booking: {str(e)}")

    # ---------------------------------------------------------------------------------------------------------------------

    async def create_checkout_session(self, clerk_user_id: str, payment_id: str) -> CheckoutSessionResponse:
        """Stripe checkout for an unpaid booking owned by the caller"""
        try:
            customer = await self._get_user(clerk_user_id)
            payment = await self._get_payment(payment_id)

            if payment["customer_id"] != customer["id"]:
                raise ForbiddenError("Booking does not belong to this customer")
            if payment["payment_status"] != PaymentStatus.PENDING.value:
                raise ValidationError("Booking is not awaiting payment")

            base_url = settings.CLIENT_DOMAIN
            metadata = {
                "product_name": f"{PaymentConstants.PRODUCT_NAME} - {payment['service']}",
                "payment_id": payment["id"],
                "artisan_id": payment["artisan_id"],
                "customer_id": customer["id"],
            }

            session = StripeConfig.create_checkout_session(
                amount_cents=to_cents(to_decimal(payment["total"])),
                success_url=f"{base_url}/bookings/{payment['id']}?payment=success",
                cancel_url=f"{base_url}/bookings/{payment['id']}?payment=cancelled",
                metadata=metadata,
                customer_email=customer.get("email"),
            )

            await self.supabase_client.table("payments").update({"stripe_session_id": session.id}).eq("id", payment["id"]).execute()

            logger.info(f"Created Stripe session {session.id} for booking {payment['id']}")
            return CheckoutSessionResponse(session_id=session.id, session_url=session.url)

        except Exception as e:
            logger.error(f"Error creating booking checkout session: {str(e)}")
            if isinstance(e, (UserNotFoundError, NotFoundError, ForbiddenError, ValidationError)):
                raise e
            raise ServerError(f"Failed to create payment session: {str(e)}")

    # ######################################################################################################################
    # Payment status transitions (pending -> paid | failed, exactly once)
    # ######################################################################################################################

    async def _settle_payment(self, payment_id: str, new_status: PaymentStatus, extra: Optional[dict] = None) -> bool:
        """Conditional update from pending; False when the payment was already settled (duplicate webhook delivery)"""
        payment_id = validate_record_id(payment_id, "payment")
        update = {"payment_status": new_status.value, **(extra or {})}

        result = (
            await self.supabase_client.table("payments")
            .update(update)
            .eq("id", payment_id)
            .eq("payment_status", PaymentStatus.PENDING.value)
            .execute()
        )

        if result.data:
            logger.info(f"✅ Payment {payment_id} marked {new_status.value}")
            return True

        # nothing matched: either the id is unknown or the payment already left pending
        await self._get_payment(payment_id)
        logger.info(f"⚠️ Payment {payment_id} already settled, {new_status.value} ignored")
        return False

    async def mark_payment_paid(self, payment_id: str, transaction_id: Optional[str] = None) -> bool:
        extra = {"transaction_id": transaction_id} if transaction_id else None
        return await self._settle_payment(payment_id, PaymentStatus.PAID, extra)

    async def mark_payment_failed(self, payment_id: str) -> bool:
        return await self._settle_payment(payment_id, PaymentStatus.FAILED)

    # ######################################################################################################################
    # Booking lifecycle
    # ######################################################################################################################

    async def update_booking_status(self, payment_id: str, new_status: BookingStatus, artisan_id: Optional[str] = None) -> PaymentRecord:
        """Move a booking along pending -> in_progress -> completed, or to cancelled from either open state"""
        payment = await self._get_payment(payment_id)

        if artisan_id is not None and payment["artisan_id"] != artisan_id:
            raise ForbiddenError("Booking does not belong to this artisan")

        current_status = BookingStatus(payment["status"])
        if new_status not in BOOKING_TRANSITIONS[current_status]:
            raise ValidationError(f"Cannot change booking status from {current_status.value} to {new_status.value}")

        # conditioned on the status we validated against, so a concurrent change makes this a no-match instead of a lost update
        result = (
            await self.supabase_client.table("payments")
            .update({"status": new_status.value})
            .eq("id", payment["id"])
            .eq("status", current_status.value)
            .execute()
        )
        if not result.data:
            raise ValidationError("Booking status changed by another request, reload and retry")

        logger.info(f"✅ Booking {payment['id']} moved {current_status.value} -> {new_status.value}")
        return PaymentRecord(**result.data[0])

    # ---------------------------------------------------------------------------------------------------------------------

    async def submit_review(self, clerk_user_id: str, payment_id: str, review: ReviewCreate) -> PaymentRecord:
        """Customers rate their own completed bookings"""
        customer = await self._get_user(clerk_user_id)
        payment = await self._get_payment(payment_id)

        if payment["customer_id"] != customer["id"]:
            raise ForbiddenError("Booking does not belong to this customer")
        if payment["status"] != BookingStatus.COMPLETED.value:
            raise ValidationError("Only completed bookings can be reviewed")

        result = (
            await self.supabase_client.table("payments")
            .update({"rating": review.rating, "review": review.review})
            .eq("id", payment["id"])
            .execute()
        )
        if not result.data:
            raise DatabaseError("Failed to save review")

        logger.info(f"✅ Review saved for booking {payment['id']}")
        return PaymentRecord(**result.data[0])
