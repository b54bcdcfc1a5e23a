from supabase import AsyncClient
from app.models.payment_models import ACTIVE_BOOKING_STATUSES, PaymentStatus, PayoutStatus
from app.models.artisan_models import ArtisanStatus
from app.services.commission_calculator import TimeWindow, average, net_payout, sum_column, to_decimal
from app.utils.time_utils import to_iso
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Set, Tuple
import logging

logger = logging.getLogger(__name__)

# PostgREST caps a single response (1000 rows by default), so full scans are read in chunks of this size
FETCH_CHUNK_SIZE = 1000


# =====================================
# Aggregate result types
# =====================================


@dataclass
class ArtisanLedgerTotals:
    artisan_id: str
    net_earnings: Decimal = Decimal("0")
    jobs: int = 0
    ratings: List[float] = field(default_factory=list)

    @property
    def average_rating(self) -> float:
        return average(self.ratings)


@dataclass
class ServiceLedgerTotals:
    service: str
    bookings: int = 0
    revenue: Decimal = Decimal("0")


@dataclass
class PendingPayoutTotals:
    records: int = 0
    net_amount: Decimal = Decimal("0")
    platform_fee_amount: Decimal = Decimal("0")
    artisan_ids: Set[str] = field(default_factory=set)

    @property
    def artisans(self) -> int:
        return len(self.artisan_ids)


@dataclass
class RevenueTotals:
    total_revenue: Decimal = Decimal("0")
    commission_earned: Decimal = Decimal("0")
    artisan_payouts: Decimal = Decimal("0")


class LedgerQueryService:
    """Read-only sums, counts and groupings over the payments table.

    Every aggregate returns zero (or an empty list) when nothing matches; callers never see None.
    Store failures are logged and re-raised as they are.
    """

    def __init__(self, supabase_client: AsyncClient):
        self.supabase_client = supabase_client

    # =====================================
    # Internal query helpers
    # =====================================

    def _payments(self, columns: str = "*", count: Optional[str] = None):
        if count:
            return self.supabase_client.table("payments").select(columns, count=count)
        return self.supabase_client.table("payments").select(columns)

    @staticmethod
    def _in_window(query, window: TimeWindow):
        return query.gte("created_at", to_iso(window.start)).lt("created_at", to_iso(window.end))

    async def _fetch_all(self, build_query: Callable) -> List[dict]:
        """Run a query built by build_query() chunk by chunk until a short page comes back"""
        rows: List[dict] = []
        offset = 0
        try:
            while True:
                result = await build_query().range(offset, offset + FETCH_CHUNK_SIZE - 1).execute()
                batch = result.data or []
                rows.extend(batch)
                if len(batch) < FETCH_CHUNK_SIZE:
                    return rows
                offset += FETCH_CHUNK_SIZE
        except Exception as e:
            logger.error(f"Error reading ledger rows: {str(e)}")
            raise

    @staticmethod
    async def _count(query) -> int:
        try:
            result = await query.limit(1).execute()
            return result.count or 0
        except Exception as e:
            logger.error(f"Error counting ledger rows: {str(e)}")
            raise

    async def _fetch_page(self, build_query: Callable, page: int, limit: int) -> Tuple[List[dict], int]:
        """One 1-indexed page plus the total row count of the filtered set.

        PostgREST answers a range that starts past the last row with 416, so pages beyond the end are served empty
        without asking for the range.
        """
        offset = (page - 1) * limit
        total = await self._count(build_query())
        if offset >= total:
            return [], total

        try:
            result = await build_query().range(offset, offset + limit - 1).execute()
            return result.data or [], total
        except Exception as e:
            logger.error(f"Error reading ledger page {page}: {str(e)}")
            raise

    # =====================================
    # Windowed sums / counts (dashboard metrics)
    # =====================================

    async def sum_paid_total(self, window: TimeWindow) -> Decimal:
        """Gross revenue of paid bookings created in the window"""
        rows = await self._fetch_all(
            lambda: self._in_window(self._payments("id, total").eq("payment_status", PaymentStatus.PAID.value), window)
            .order("created_at")
            .order("id")
        )
        return sum_column(rows, "total")

    async def sum_paid_platform_fee(self, window: TimeWindow) -> Decimal:
        """Commission earned on paid bookings created in the window"""
        rows = await self._fetch_all(
            lambda: self._in_window(self._payments("id, platform_fee").eq("payment_status", PaymentStatus.PAID.value), window)
            .order("created_at")
            .order("id")
        )
        return sum_column(rows, "platform_fee")

    async def count_active_bookings(self, window: TimeWindow) -> int:
        """Bookings still pending or in progress (booking status, not payment status) created in the window"""
        query = self._in_window(self._payments("id", count="exact").in_("status", list(ACTIVE_BOOKING_STATUSES)), window)
        return await self._count(query)

    async def count_approved_artisans(self, created_before: Optional[datetime] = None) -> int:
        query = self.supabase_client.table("artisans").select("id", count="exact").eq("status", ArtisanStatus.APPROVED.value)
        if created_before is not None:
            query = query.lt("created_at", to_iso(created_before))
        return await self._count(query)

    async def count_stale_pending_artisans(self, created_before: datetime) -> int:
        """Applications still waiting for review that were submitted before the given instant"""
        query = (
            self.supabase_client.table("artisans")
            .select("id", count="exact")
            .eq("status", ArtisanStatus.PENDING.value)
            .lt("created_at", to_iso(created_before))
        )
        return await self._count(query)

    # =====================================
    # Groupings over paid bookings
    # =====================================

    async def _paid_rows(self, columns: str) -> List[dict]:
        return await self._fetch_all(
            lambda: self._payments(columns).eq("payment_status", PaymentStatus.PAID.value).order("created_at").order("id")
        )

    async def earnings_by_artisan(self) -> List[ArtisanLedgerTotals]:
        """Net earnings, job count and ratings per artisan, in order of each artisan's first paid booking"""
        rows = await self._paid_rows("id, artisan_id, total, platform_fee, rating, created_at")

        groups: Dict[str, ArtisanLedgerTotals] = {}
        for row in rows:
            artisan_id = row["artisan_id"]
            totals = groups.setdefault(artisan_id, ArtisanLedgerTotals(artisan_id=artisan_id))
            totals.net_earnings += net_payout(row)
            totals.jobs += 1
            if row.get("rating") is not None:
                totals.ratings.append(float(row["rating"]))

        return list(groups.values())

    async def bookings_by_service(self) -> List[ServiceLedgerTotals]:
        """Paid booking count and gross revenue per service label, in order of first appearance"""
        rows = await self._paid_rows("id, service, total, created_at")

        groups: Dict[str, ServiceLedgerTotals] = {}
        for row in rows:
            service = row["service"]
            totals = groups.setdefault(service, ServiceLedgerTotals(service=service))
            totals.bookings += 1
            totals.revenue += to_decimal(row.get("total"))

        return list(groups.values())

    async def pending_payout_totals(self) -> PendingPayoutTotals:
        """Paid bookings whose artisan payout has not been processed yet"""
        rows = await self._fetch_all(
            lambda: self._payments("id, artisan_id, total, platform_fee, created_at")
            .eq("payment_status", PaymentStatus.PAID.value)
            .eq("payout_status", PayoutStatus.PENDING.value)
            .order("created_at")
            .order("id")
        )

        totals = PendingPayoutTotals(records=len(rows))
        for row in rows:
            totals.net_amount += net_payout(row)
            totals.platform_fee_amount += to_decimal(row.get("platform_fee"))
            totals.artisan_ids.add(row["artisan_id"])
        return totals

    async def revenue_summary(self) -> RevenueTotals:
        rows = await self._paid_rows("id, total, platform_fee, created_at")

        summary = RevenueTotals()
        summary.total_revenue = sum_column(rows, "total")
        summary.commission_earned = sum_column(rows, "platform_fee")
        summary.artisan_payouts = summary.total_revenue - summary.commission_earned
        return summary

    # =====================================
    # Artisan scoped reads
    # =====================================

    async def paid_records_for_artisan(self, artisan_id: str) -> List[dict]:
        """All paid bookings of one artisan, oldest first"""
        return await self._fetch_all(
            lambda: self._payments("id, total, platform_fee, created_at")
            .eq("artisan_id", artisan_id)
            .eq("payment_status", PaymentStatus.PAID.value)
            .order("created_at")
            .order("id")
        )

    async def paid_records_page(self, artisan_id: str, page: int, limit: int) -> Tuple[List[dict], int]:
        """One page of an artisan's paid bookings, newest first"""
        return await self._fetch_page(
            lambda: self._payments("*", count="exact")
            .eq("artisan_id", artisan_id)
            .eq("payment_status", PaymentStatus.PAID.value)
            .order("created_at", desc=True)
            .order("id", desc=True),
            page,
            limit,
        )

    async def rated_records_page(self, artisan_id: str, page: int, limit: int) -> Tuple[List[dict], int]:
        """One page of an artisan's bookings that carry a rating, newest first"""
        return await self._fetch_page(
            lambda: self._payments("id, customer_id, service, rating, review, created_at", count="exact")
            .eq("artisan_id", artisan_id)
            .not_.is_("rating", "null")
            .order("created_at", desc=True)
            .order("id", desc=True),
            page,
            limit,
        )

    async def records_for_artisan(self, artisan_id: str, status: Optional[str] = None) -> List[dict]:
        """All bookings of one artisan, newest first, optionally narrowed to one booking status"""

        def build_query():
            query = self._payments("*").eq("artisan_id", artisan_id)
            if status:
                query = query.eq("status", status)
            return query.order("created_at", desc=True).order("id", desc=True)

        return await self._fetch_all(build_query)
