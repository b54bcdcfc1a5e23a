from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class PayoutStatus(str, Enum):
    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"


class PaymentMethod(str, Enum):
    CARD = "card"
    PAYPAL = "paypal"
    APPLE = "apple"


# booking statuses counted as "active" on the admin dashboard
ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING.value, BookingStatus.IN_PROGRESS.value)


class PaymentRecord(BaseModel):
    """One booking transaction row from the payments table"""

    id: str
    customer_id: str
    artisan_id: str
    service: str
    date: Optional[str] = None
    time: Optional[str] = None
    duration: Optional[str] = None
    location: Optional[str] = None
    hourly_rate: Decimal = Decimal("0")
    subtotal: Decimal = Decimal("0")
    platform_fee: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    status: BookingStatus
    payment_status: PaymentStatus
    payout_status: PayoutStatus = PayoutStatus.PENDING
    payment_method: Optional[PaymentMethod] = None
    transaction_id: Optional[str] = None
    stripe_session_id: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    review: Optional[str] = None
    processed_at: Optional[datetime] = None
    created_at: datetime


# =====================================
# Booking creation / payment models
# =====================================


class BookingCreate(BaseModel):
    artisan_id: str
    service: str
    date: str
    time: str
    location: str
    hours: Decimal = Field(gt=0, description="Booked duration in hours")
    payment_method: PaymentMethod = PaymentMethod.CARD


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class ReviewCreate(BaseModel):
    rating: float = Field(ge=0, le=5)
    review: Optional[str] = None


class CheckoutSessionResponse(BaseModel):
    session_id: str
    session_url: str
