"""Explicit read-side joins between payments, artisans, users and categories.

PostgREST embedding would hide the join inside a select string; here the loader fetches each referenced
table once with an `in` filter and the pure join functions below build the denormalized views, so the
join rules (what "Unknown" means, which name wins) are testable without a store.
"""

from supabase import AsyncClient
from app.models.artisan_models import ArtisanDisplay
from app.models.admin.admin_dashboard_models import RecentBooking
from app.services.commission_calculator import to_decimal
from app.utils.time_utils import parse_timestamp
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional
import logging

logger = logging.getLogger(__name__)

UNKNOWN_NAME = "Unknown"
UNSPECIFIED_CATEGORY = "Not specified"

Rows = Dict[str, dict]


@dataclass
class LookupMaps:
    artisans: Rows = field(default_factory=dict)  # artisan_id -> artisans row
    users: Rows = field(default_factory=dict)  # user_id -> users row
    categories: Rows = field(default_factory=dict)  # category_id -> categories row


# =====================================
# Pure join functions
# =====================================


def full_name(user: Optional[Mapping], default: str = UNKNOWN_NAME) -> str:
    if not user:
        return default
    name = " ".join(part for part in (user.get("first_name"), user.get("last_name")) if part)
    return name or default


def join_artisan(artisan_id: str, lookups: LookupMaps) -> ArtisanDisplay:
    """Artisan profile + its user + its category, with placeholders for missing references"""
    artisan = lookups.artisans.get(artisan_id) or {}
    user = lookups.users.get(artisan.get("user_id")) if artisan else None
    category = lookups.categories.get(artisan.get("category_id")) if artisan else None

    return ArtisanDisplay(
        id=artisan_id,
        name=full_name(user),
        email=user.get("email") if user else None,
        phone=(user.get("phone") if user else None) or "Not provided",
        category=(category or {}).get("name") or UNSPECIFIED_CATEGORY,
        location=artisan.get("location"),
        experience=artisan.get("experience"),
        hourly_rate=artisan.get("hourly_rate"),
        created_at=parse_timestamp(artisan["created_at"]) if artisan.get("created_at") else None,
    )


def join_booking(payment: Mapping, lookups: LookupMaps) -> RecentBooking:
    """Payment row + customer name + artisan name"""
    customer = lookups.users.get(payment.get("customer_id"))
    artisan = lookups.artisans.get(payment.get("artisan_id"))
    artisan_user = lookups.users.get(artisan.get("user_id")) if artisan else None

    return RecentBooking(
        id=payment["id"],
        customer=full_name(customer),
        artisan=full_name(artisan_user),
        service=payment["service"],
        amount=float(to_decimal(payment.get("total"))),
        commission=float(to_decimal(payment.get("platform_fee"))),
        status=payment["status"],
        date=parse_timestamp(payment["created_at"]),
        location=payment.get("location"),
    )


def _unique(values: Iterable[Optional[str]]) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


# =====================================
# Loader
# =====================================


class LedgerJoinLoader:
    """Fetches the rows referenced by a set of payments/artisans, one `in` query per table"""

    def __init__(self, supabase_client: AsyncClient):
        self.supabase_client = supabase_client

    async def _rows_by_id(self, table: str, ids: List[str]) -> Rows:
        if not ids:
            return {}
        try:
            result = await self.supabase_client.table(table).select("*").in_("id", ids).execute()
            return {row["id"]: row for row in result.data or []}
        except Exception as e:
            logger.error(f"Error loading {table} rows for join: {str(e)}")
            raise

    async def load_for_artisans(self, artisan_rows: Iterable[Mapping], extra_user_ids: Iterable[str] = ()) -> LookupMaps:
        """Lookups for artisan rows already in hand (their users and categories)"""
        artisans = {row["id"]: dict(row) for row in artisan_rows}
        user_ids = _unique([row.get("user_id") for row in artisans.values()] + list(extra_user_ids))
        category_ids = _unique(row.get("category_id") for row in artisans.values())

        return LookupMaps(
            artisans=artisans,
            users=await self._rows_by_id("users", user_ids),
            categories=await self._rows_by_id("categories", category_ids),
        )

    async def load_for_artisan_ids(self, artisan_ids: Iterable[str]) -> LookupMaps:
        artisans = await self._rows_by_id("artisans", _unique(artisan_ids))
        return await self.load_for_artisans(artisans.values())

    async def load_for_payments(self, payments: Iterable[Mapping]) -> LookupMaps:
        """Artisans, their users and the paying customers referenced by the payments"""
        payments = list(payments)
        artisans = await self._rows_by_id("artisans", _unique(p.get("artisan_id") for p in payments))
        customer_ids = _unique(p.get("customer_id") for p in payments)
        return await self.load_for_artisans(artisans.values(), extra_user_ids=customer_ids)
