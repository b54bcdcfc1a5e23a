from fastapi import APIRouter, Depends
from supabase import AsyncClient
from app.utils.supabase_client_handlers import get_supabase_client
from app.utils.time_utils import Clock, get_clock
from app.utils.user_auth import get_current_clerk_user_id
from app.services.payment_mgnt_services import PaymentService
from app.models.payment_models import BookingCreate, CheckoutSessionResponse, PaymentRecord, ReviewCreate

booking_router = APIRouter(prefix="/bookings", tags=["Bookings"])


async def get_payment_service(
    supabase_client: AsyncClient = Depends(get_supabase_client),
    clock: Clock = Depends(get_clock),
) -> PaymentService:
    """Dependency to get PaymentService instance"""
    return PaymentService(supabase_client, clock)


#############################################################################################################################################


@booking_router.post("", response_model=PaymentRecord)
async def create_booking(
    booking: BookingCreate,
    clerk_user_id: str = Depends(get_current_clerk_user_id),
    payment_service: PaymentService = Depends(get_payment_service),
):
    """Book an approved artisan; amounts are priced server side"""
    return await payment_service.create_booking(clerk_user_id, booking)


# ------------------------------------------------------------------------------------------------------------------------------------------------------


@booking_router.post("/{payment_id}/checkout", response_model=CheckoutSessionResponse)
async def create_booking_checkout(
    payment_id: str,
    clerk_user_id: str = Depends(get_current_clerk_user_id),
    payment_service: PaymentService = Depends(get_payment_service),
):
    """Stripe checkout session for an unpaid booking"""
    return await payment_service.create_checkout_session(clerk_user_id, payment_id)


# ------------------------------------------------------------------------------------------------------------------------------------------------------


@booking_router.post("/{payment_id}/review", response_model=PaymentRecord)
async def review_booking(
    payment_id: str,
    review: ReviewCreate,
    clerk_user_id: str = Depends(get_current_clerk_user_id),
    payment_service: PaymentService = Depends(get_payment_service),
):
    """Rate a completed booking"""
    return await payment_service.submit_review(clerk_user_id, payment_id, review)
