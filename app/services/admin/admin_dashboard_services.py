from supabase import AsyncClient
from app.models.admin.admin_dashboard_models import (
    ActivityType,
    AlertSeverity,
    DashboardMetric,
    DashboardStatsResponse,
    PlatformAlert,
    PopularCategory,
    RecentActivityItem,
    RecentBooking,
    TopArtisan,
)
from app.models.artisan_models import ArtisanStatus
from app.models.payment_models import BookingStatus
from app.services.commission_calculator import (
    format_money,
    format_percent_change,
    parse_timeframe,
    percentage_change,
    previous_window,
    resolve_timeframe,
    trend_direction,
)
from app.services.ledger_joins import LedgerJoinLoader, full_name, join_artisan, join_booking
from app.services.ledger_query_services import LedgerQueryService
from app.configs.app_settings import settings
from app.utils.time_utils import Clock, format_time_ago, parse_timestamp, utc_now
from datetime import timedelta
from decimal import Decimal
from typing import List, Optional, Union
import logging

logger = logging.getLogger(__name__)


def _build_metric(title: str, previous: Union[int, Decimal], current: Union[int, Decimal], money: bool) -> DashboardMetric:
    change = percentage_change(previous, current)
    return DashboardMetric(
        title=title,
        value=float(current),
        display_value=format_money(current) if money else str(current),
        percent_change=change,
        display_change=format_percent_change(change),
        trend=trend_direction(change),
    )


class AdminDashboardService:
    def __init__(self, supabase_client: AsyncClient, clock: Clock = utc_now):
        self.supabase_client = supabase_client
        self.clock = clock
        self.ledger = LedgerQueryService(supabase_client)
        self.joins = LedgerJoinLoader(supabase_client)

    # =====================================
    # STAT CARDS
    # =====================================

    async def get_dashboard_stats(self, timeframe: Optional[str] = None) -> DashboardStatsResponse:
        """Artisans, revenue, active bookings and commission for the window, each vs the window before it"""
        current = resolve_timeframe(timeframe, self.clock())
        previous = previous_window(current)

        # artisans are a running total: approved now vs approved before this window started
        total_artisans = await self.ledger.count_approved_artisans()
        previous_artisans = await self.ledger.count_approved_artisans(created_before=current.start)

        revenue = await self.ledger.sum_paid_total(current)
        previous_revenue = await self.ledger.sum_paid_total(previous)

        active_bookings = await self.ledger.count_active_bookings(current)
        previous_active_bookings = await self.ledger.count_active_bookings(previous)

        commission = await self.ledger.sum_paid_platform_fee(current)
        previous_commission = await self.ledger.sum_paid_platform_fee(previous)

        metrics = [
            _build_metric("Total Artisans", previous_artisans, total_artisans, money=False),
            _build_metric("Total Revenue", previous_revenue, revenue, money=True),
            _build_metric("Active Bookings", previous_active_bookings, active_bookings, money=False),
            _build_metric("Commission Earned", previous_commission, commission, money=True),
        ]

        return DashboardStatsResponse(
            timeframe=parse_timeframe(timeframe),
            window_start=current.start,
            window_end=current.end,
            metrics=metrics,
        )

    # =====================================
    # RANKINGS
    # =====================================

    async def get_top_artisans(self, limit: int = settings.TOP_ARTISANS_LIMIT) -> List[TopArtisan]:
        """Highest net earners over paid bookings; equal earnings keep first-appearance order"""
        groups = await self.ledger.earnings_by_artisan()

        # sorted() is stable, so ties stay in the order the ledger grouped them
        ranked = sorted(groups, key=lambda g: g.net_earnings, reverse=True)[:limit]
        if not ranked:
            return []

        lookups = await self.joins.load_for_artisan_ids(g.artisan_id for g in ranked)

        top_artisans = []
        for group in ranked:
            artisan = join_artisan(group.artisan_id, lookups)
            top_artisans.append(
                TopArtisan(
                    id=group.artisan_id,
                    name=artisan.name,
                    category=artisan.category,
                    earnings=float(group.net_earnings),
                    rating=group.average_rating,
                    jobs=group.jobs,
                )
            )
        return top_artisans

    # --------------------------------------------------------------

    async def get_popular_categories(self, limit: int = settings.POPULAR_CATEGORIES_LIMIT) -> List[PopularCategory]:
        groups = await self.ledger.bookings_by_service()
        ranked = sorted(groups, key=lambda g: g.bookings, reverse=True)[:limit]

        return [PopularCategory(category=g.service, bookings=g.bookings, revenue=float(g.revenue)) for g in ranked]

    # =====================================
    # ALERTS
    # =====================================

    async def get_platform_alerts(self) -> List[PlatformAlert]:
        """Recomputed on every call; there is nothing to acknowledge or dismiss"""
        threshold = self.clock() - timedelta(hours=settings.STALE_APPLICATION_HOURS)

        stale_applications = await self.ledger.count_stale_pending_artisans(created_before=threshold)
        pending_payouts = await self.ledger.pending_payout_totals()

        alerts: List[PlatformAlert] = []

        if stale_applications > 0:
            alerts.append(
                PlatformAlert(
                    severity=AlertSeverity.WARNING,
                    message=f"{stale_applications} artisan applications pending review",
                    detail=f"Applications older than {settings.STALE_APPLICATION_HOURS} hours",
                    suggested_action="Review",
                )
            )

        if pending_payouts.records > 0:
            alerts.append(
                PlatformAlert(
                    severity=AlertSeverity.INFO,
                    message=f"{pending_payouts.records} payouts pending",
                    detail=f"Total payout: {format_money(pending_payouts.platform_fee_amount)}",
                    suggested_action="Process",
                )
            )

        return alerts

    # =====================================
    # FEEDS
    # =====================================

    async def get_recent_bookings(self, limit: int = 10) -> List[RecentBooking]:
        try:
            result = await self.supabase_client.table("payments").select("*").order("created_at", desc=True).limit(limit).execute()
        except Exception as e:
            logger.error(f"Error fetching recent bookings: {str(e)}")
            raise

        payments = result.data or []
        lookups = await self.joins.load_for_payments(payments)
        return [join_booking(payment, lookups) for payment in payments]

    # --------------------------------------------------------------

    async def get_recent_activity(self) -> List[RecentActivityItem]:
        """Two newest pending applications followed by the two newest completed bookings"""
        now = self.clock()

        try:
            applications = (
                await self.supabase_client.table("artisans")
                .select("*")
                .eq("status", ArtisanStatus.PENDING.value)
                .order("created_at", desc=True)
                .limit(2)
                .execute()
            )
            completed = (
                await self.supabase_client.table("payments")
                .select("*")
                .eq("status", BookingStatus.COMPLETED.value)
                .order("created_at", desc=True)
                .limit(2)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error fetching recent activity: {str(e)}")
            raise

        application_lookups = await self.joins.load_for_artisans(applications.data or [])
        booking_lookups = await self.joins.load_for_payments(completed.data or [])

        activities: List[RecentActivityItem] = []

        for application in applications.data or []:
            activities.append(
                RecentActivityItem(
                    action="New artisan application",
                    user=full_name(application_lookups.users.get(application.get("user_id"))),
                    time=format_time_ago(parse_timestamp(application["created_at"]), now),
                    type=ActivityType.APPLICATION,
                )
            )

        for booking in completed.data or []:
            activities.append(
                RecentActivityItem(
                    action="Booking completed",
                    user=full_name(booking_lookups.users.get(booking.get("customer_id")), default="Unknown Customer"),
                    time=format_time_ago(parse_timestamp(booking["created_at"]), now),
                    type=ActivityType.BOOKING,
                )
            )

        return activities[:4]
