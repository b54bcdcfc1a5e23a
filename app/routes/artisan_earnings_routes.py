from fastapi import APIRouter, Depends, Query
from supabase import AsyncClient
from app.utils.supabase_client_handlers import get_supabase_client
from app.utils.time_utils import Clock, get_clock
from app.utils.user_auth import get_current_clerk_user_id
from app.services.artisan_earnings_services import ArtisanEarningsService
from app.services.payment_mgnt_services import PaymentService
from app.models.artisan_earnings_models import ArtisanBookingItem, EarningsHistoryResponse, EarningsSummaryResponse, ReviewsResponse
from app.models.payment_models import BookingStatusUpdate, PaymentRecord
from app.configs.app_settings import settings
from typing import List, Optional

artisan_earnings_router = APIRouter(prefix="/artisans/me", tags=["Artisans"])


async def get_artisan_earnings_service(supabase_client: AsyncClient = Depends(get_supabase_client)) -> ArtisanEarningsService:
    """Dependency to get ArtisanEarningsService instance"""
    return ArtisanEarningsService(supabase_client)


async def get_payment_service(
    supabase_client: AsyncClient = Depends(get_supabase_client),
    clock: Clock = Depends(get_clock),
) -> PaymentService:
    """Dependency to get PaymentService instance"""
    return PaymentService(supabase_client, clock)


async def get_current_artisan_id(
    clerk_user_id: str = Depends(get_current_clerk_user_id),
    earnings_service: ArtisanEarningsService = Depends(get_artisan_earnings_service),
) -> str:
    """Artisan profile of the signed in user (404 if the user never applied)"""
    return await earnings_service.get_artisan_id(clerk_user_id)


# =====================================
# EARNINGS ENDPOINTS
# =====================================


@artisan_earnings_router.get("/earnings/summary", response_model=EarningsSummaryResponse)
async def get_earnings_summary(
    artisan_id: str = Depends(get_current_artisan_id),
    earnings_service: ArtisanEarningsService = Depends(get_artisan_earnings_service),
):
    """Total net earnings, job count and month by month breakdown"""
    return await earnings_service.get_earnings_summary(artisan_id)


# --------------------------------------------------------------


@artisan_earnings_router.get("/earnings/history", response_model=EarningsHistoryResponse)
async def get_earnings_history(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    artisan_id: str = Depends(get_current_artisan_id),
    earnings_service: ArtisanEarningsService = Depends(get_artisan_earnings_service),
):
    """Paid bookings, newest first"""
    return await earnings_service.get_earnings_history(artisan_id, page, limit)


# --------------------------------------------------------------


@artisan_earnings_router.get("/reviews", response_model=ReviewsResponse)
async def get_my_reviews(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    artisan_id: str = Depends(get_current_artisan_id),
    earnings_service: ArtisanEarningsService = Depends(get_artisan_earnings_service),
):
    """Rated bookings with the page's average rating"""
    return await earnings_service.get_reviews(artisan_id, page, limit)


# =====================================
# BOOKING ENDPOINTS
# =====================================


@artisan_earnings_router.get("/bookings", response_model=List[ArtisanBookingItem])
async def get_my_bookings(
    status: Optional[str] = Query(None, description="pending | in_progress | completed | cancelled"),
    artisan_id: str = Depends(get_current_artisan_id),
    earnings_service: ArtisanEarningsService = Depends(get_artisan_earnings_service),
):
    return await earnings_service.get_bookings(artisan_id, status)


# --------------------------------------------------------------


@artisan_earnings_router.patch("/bookings/{payment_id}/status", response_model=PaymentRecord)
async def update_my_booking_status(
    payment_id: str,
    request: BookingStatusUpdate,
    artisan_id: str = Depends(get_current_artisan_id),
    payment_service: PaymentService = Depends(get_payment_service),
):
    """Start, complete or cancel one of the artisan's bookings"""
    return await payment_service.update_booking_status(payment_id, request.status, artisan_id=artisan_id)
