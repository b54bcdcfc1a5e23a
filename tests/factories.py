"""Row builders for the fake store. Money columns are stored as strings, the way PostgREST returns numerics."""

from datetime import datetime, timezone
from typing import Optional
from tests.fake_supabase import FakeSupabase
import uuid

FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def add_user(
    db: FakeSupabase,
    first_name: str = "Ada",
    last_name: str = "Lovelace",
    role: str = "customer",
    clerk_user_id: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
) -> dict:
    (row,) = db.seed(
        "users",
        {
            "id": new_id(),
            "clerk_user_id": clerk_user_id or f"user_{uuid.uuid4().hex[:12]}",
            "email": email or f"{first_name.lower()}.{last_name.lower()}@example.com",
            "first_name": first_name,
            "last_name": last_name,
            "phone": phone,
            "role": role,
        },
    )
    return row


def add_category(db: FakeSupabase, name: str, is_active: bool = True) -> dict:
    (row,) = db.seed("categories", {"id": new_id(), "name": name, "is_active": is_active})
    return row


def add_artisan(
    db: FakeSupabase,
    user_id: str,
    created_at: datetime,
    status: str = "approved",
    category_id: Optional[str] = None,
    hourly_rate: float = 50,
    is_available: bool = True,
) -> dict:
    (row,) = db.seed(
        "artisans",
        {
            "id": new_id(),
            "user_id": user_id,
            "category_id": category_id,
            "experience": "5 years",
            "hourly_rate": hourly_rate,
            "location": "Lagos",
            "status": status,
            "is_available": is_available,
            "created_at": created_at.isoformat(),
        },
    )
    return row


def add_payment(
    db: FakeSupabase,
    artisan_id: str,
    created_at: datetime,
    total: str = "100.00",
    platform_fee: str = "10.00",
    customer_id: Optional[str] = None,
    service: str = "Plumbing",
    status: str = "completed",
    payment_status: str = "paid",
    payout_status: str = "pending",
    rating: Optional[float] = None,
    review: Optional[str] = None,
) -> dict:
    (row,) = db.seed(
        "payments",
        {
            "id": new_id(),
            "customer_id": customer_id or new_id(),
            "artisan_id": artisan_id,
            "service": service,
            "date": created_at.date().isoformat(),
            "time": "10:00",
            "duration": "2 hours",
            "location": "Lagos",
            "hourly_rate": "50.00",
            "subtotal": total,
            "platform_fee": platform_fee,
            "tax": "0.00",
            "total": total,
            "status": status,
            "payment_status": payment_status,
            "payout_status": payout_status,
            "payment_method": "card",
            "rating": rating,
            "review": review,
            "processed_at": None,
            "created_at": created_at.isoformat(),
        },
    )
    return row
