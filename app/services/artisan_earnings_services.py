from supabase import AsyncClient
from app.models.artisan_earnings_models import (
    ArtisanBookingItem,
    EarningsHistoryItem,
    EarningsHistoryResponse,
    EarningsSummaryResponse,
    MonthlyEarnings,
    PaginationMeta,
    ReviewItem,
    ReviewsResponse,
)
from app.models.payment_models import BookingStatus
from app.services.commission_calculator import average, net_payout, to_decimal
from app.services.ledger_query_services import LedgerQueryService
from app.custom_error import NotFoundError, UserNotFoundError, ValidationError
from app.utils.time_utils import parse_timestamp
from decimal import Decimal
from typing import Dict, List, Optional
import logging
import math

logger = logging.getLogger(__name__)


def _pagination_meta(total: int, page: int, limit: int) -> PaginationMeta:
    return PaginationMeta(total=total, page=page, limit=limit, total_pages=math.ceil(total / limit) if total > 0 else 1)


class ArtisanEarningsService:
    def __init__(self, supabase_client: AsyncClient):
        self.supabase_client = supabase_client
        self.ledger = LedgerQueryService(supabase_client)

    async def get_artisan_id(self, clerk_user_id: str) -> str:
        """Artisan profile id of the signed in user"""
        try:
            user_result = await self.supabase_client.table("users").select("id").eq("clerk_user_id", clerk_user_id).execute()
            if not user_result.data:
                raise UserNotFoundError()

            artisan_result = await self.supabase_client.table("artisans").select("id").eq("user_id", user_result.data[0]["id"]).execute()
            if not artisan_result.data:
                raise NotFoundError("Artisan profile not found")

            return artisan_result.data[0]["id"]

        except Exception as e:
            logger.error(f"Error resolving artisan profile - {str(e)}")
            raise

    # =====================================
    # EARNINGS
    # =====================================

    async def get_earnings_summary(self, artisan_id: str) -> EarningsSummaryResponse:
        """Net earnings over every paid booking, plus one bucket per calendar month that has any"""
        records = await self.ledger.paid_records_for_artisan(artisan_id)

        total_earnings = Decimal("0")
        month_earnings: Dict[str, Decimal] = {}
        month_jobs: Dict[str, int] = {}

        for record in records:
            net = net_payout(record)
            total_earnings += net

            month = parse_timestamp(record["created_at"]).strftime("%Y-%m")
            month_earnings[month] = month_earnings.get(month, Decimal("0")) + net
            month_jobs[month] = month_jobs.get(month, 0) + 1

        monthly = [
            MonthlyEarnings(month=month, earnings=float(month_earnings[month]), jobs=month_jobs[month]) for month in sorted(month_earnings)
        ]

        return EarningsSummaryResponse(total_earnings=float(total_earnings), total_jobs=len(records), monthly=monthly)

    # --------------------------------------------------------------

    async def get_earnings_history(self, artisan_id: str, page: int = 1, limit: int = 10) -> EarningsHistoryResponse:
        """Paid bookings newest first with gross / commission / net columns"""
        rows, total = await self.ledger.paid_records_page(artisan_id, page, limit)

        items = []
        for row in rows:
            items.append(
                EarningsHistoryItem(
                    id=row["id"],
                    service=row["service"],
                    date=row.get("date"),
                    gross=float(to_decimal(row.get("total"))),
                    commission=float(to_decimal(row.get("platform_fee"))),
                    net=float(net_payout(row)),
                    payout_status=row.get("payout_status") or "pending",
                    processed_at=parse_timestamp(row["processed_at"]) if row.get("processed_at") else None,
                    created_at=parse_timestamp(row["created_at"]),
                )
            )

        return EarningsHistoryResponse(data=items, meta=_pagination_meta(total, page, limit))

    # =====================================
    # REVIEWS / BOOKINGS
    # =====================================

    async def get_reviews(self, artisan_id: str, page: int = 1, limit: int = 10) -> ReviewsResponse:
        """Rated bookings newest first.

        average_rating is the mean of the ratings on this page only, not of the artisan's whole history,
        so it moves as the caller pages through the list.
        """
        rows, total = await self.ledger.rated_records_page(artisan_id, page, limit)

        reviews = [
            ReviewItem(
                id=row["id"],
                customer_id=row["customer_id"],
                service=row["service"],
                rating=float(row["rating"]),
                review=row.get("review"),
                created_at=parse_timestamp(row["created_at"]),
            )
            for row in rows
        ]

        return ReviewsResponse(
            data=reviews,
            meta=_pagination_meta(total, page, limit),
            average_rating=average(review.rating for review in reviews),
        )

    # --------------------------------------------------------------

    async def get_bookings(self, artisan_id: str, status: Optional[str] = None) -> List[ArtisanBookingItem]:
        if status is not None:
            try:
                status = BookingStatus(status).value
            except ValueError:
                raise ValidationError(f"Invalid booking status: {status}")

        rows = await self.ledger.records_for_artisan(artisan_id, status)

        return [
            ArtisanBookingItem(
                id=row["id"],
                customer_id=row["customer_id"],
                service=row["service"],
                date=row.get("date"),
                time=row.get("time"),
                location=row.get("location"),
                total=float(to_decimal(row.get("total"))),
                status=row["status"],
                payment_status=row["payment_status"],
                created_at=parse_timestamp(row["created_at"]),
            )
            for row in rows
        ]
