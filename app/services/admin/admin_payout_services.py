from supabase import AsyncClient
from app.models.admin.admin_payout_models import PendingPayoutsResponse, ProcessPayoutsResponse, RevenueSummaryResponse
from app.models.payment_models import PaymentStatus, PayoutStatus
from app.services.ledger_query_services import LedgerQueryService
from app.configs.app_settings import settings
from app.utils.time_utils import Clock, to_iso, utc_now
from datetime import timedelta
import logging

logger = logging.getLogger(__name__)


class AdminPayoutService:
    def __init__(self, supabase_client: AsyncClient, clock: Clock = utc_now):
        self.supabase_client = supabase_client
        self.clock = clock
        self.ledger = LedgerQueryService(supabase_client)

    # =====================================
    # PAYOUT OPERATIONS
    # =====================================

    async def get_pending_payouts(self) -> PendingPayoutsResponse:
        """Net amount owed on paid bookings whose payout is still pending"""
        pending = await self.ledger.pending_payout_totals()

        return PendingPayoutsResponse(
            total=float(pending.net_amount),
            artisans=pending.artisans,
            next_payout_date=self.clock() + timedelta(days=settings.PAYOUT_INTERVAL_DAYS),
        )

    # --------------------------------------------------------------

    async def process_pending_payouts(self) -> ProcessPayoutsResponse:
        """Move every paid + pending-payout booking to processed in one conditional bulk update.

        The filter is part of the UPDATE itself, so Postgres re-checks payout_status = pending on each row
        under its row lock: two overlapping runs can never both process the same booking, and a rerun with
        nothing new simply updates zero rows. Bookings that are not paid are never selected.
        """
        processed_at = self.clock()

        try:
            result = (
                await self.supabase_client.table("payments")
                .update({"payout_status": PayoutStatus.PROCESSED.value, "processed_at": to_iso(processed_at)})
                .eq("payment_status", PaymentStatus.PAID.value)
                .eq("payout_status", PayoutStatus.PENDING.value)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error processing payouts: {str(e)}")
            raise

        processed_count = len(result.data or [])
        if processed_count:
            logger.info(f"✅ Processed {processed_count} payouts at {to_iso(processed_at)}")
        else:
            logger.info("No pending payouts to process")

        remaining = await self.ledger.pending_payout_totals()

        return ProcessPayoutsResponse(
            success=True,
            processed=processed_count,
            total=float(remaining.net_amount),
            processed_at=processed_at,
        )

    # =====================================
    # REVENUE
    # =====================================

    async def get_revenue_summary(self) -> RevenueSummaryResponse:
        summary = await self.ledger.revenue_summary()

        return RevenueSummaryResponse(
            total_revenue=float(summary.total_revenue),
            commission_earned=float(summary.commission_earned),
            artisan_payouts=float(summary.artisan_payouts),
        )
