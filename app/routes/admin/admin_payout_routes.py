from fastapi import APIRouter, Depends
from supabase import AsyncClient
from app.utils.supabase_client_handlers import get_supabase_client
from app.utils.time_utils import Clock, get_clock
from app.utils.user_auth import require_admin
from app.services.admin.admin_payout_services import AdminPayoutService
from app.models.admin.admin_payout_models import PendingPayoutsResponse, ProcessPayoutsResponse, RevenueSummaryResponse

admin_payout_router = APIRouter(prefix="/admin/payments", tags=["Admin"], dependencies=[Depends(require_admin)])


async def get_admin_payout_service(
    supabase_client: AsyncClient = Depends(get_supabase_client),
    clock: Clock = Depends(get_clock),
) -> AdminPayoutService:
    """Dependency to get AdminPayoutService instance"""
    return AdminPayoutService(supabase_client, clock)


# =====================================
# PAYOUT ENDPOINTS
# =====================================


@admin_payout_router.get("/pending-payouts", response_model=PendingPayoutsResponse)
async def get_pending_payouts(payout_service: AdminPayoutService = Depends(get_admin_payout_service)):
    """Net amount waiting to be paid out and how many artisans it covers"""
    return await payout_service.get_pending_payouts()


# --------------------------------------------------------------


@admin_payout_router.post("/process-payouts", response_model=ProcessPayoutsResponse)
async def process_payouts(payout_service: AdminPayoutService = Depends(get_admin_payout_service)):
    """Mark every paid booking with a pending payout as processed (safe to call repeatedly)"""
    return await payout_service.process_pending_payouts()


# --------------------------------------------------------------


@admin_payout_router.get("/revenue-summary", response_model=RevenueSummaryResponse)
async def get_revenue_summary(payout_service: AdminPayoutService = Depends(get_admin_payout_service)):
    """All-time revenue split into commission and artisan payouts"""
    return await payout_service.get_revenue_summary()
