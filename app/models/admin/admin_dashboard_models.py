from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from enum import Enum

# =====================================
# DASHBOARD RESPONSE MODELS
# =====================================


class Timeframe(str, Enum):
    SEVEN_DAYS = "7days"
    THIRTY_DAYS = "30days"
    NINETY_DAYS = "90days"
    ONE_YEAR = "1year"


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"


class DashboardMetric(BaseModel):
    """One stat card on the admin dashboard, computed per request"""

    title: str
    value: float
    display_value: str  # "$1234.50" for money, "12" for counts
    percent_change: float
    display_change: str  # "+50%", "-12%", "0%"
    trend: TrendDirection


class TopArtisan(BaseModel):
    id: str
    name: str
    category: str
    earnings: float  # net of platform fee
    rating: float
    jobs: int


class PopularCategory(BaseModel):
    category: str
    bookings: int
    revenue: float


class AlertSeverity(str, Enum):
    WARNING = "warning"
    INFO = "info"
    ERROR = "error"


class PlatformAlert(BaseModel):
    severity: AlertSeverity
    message: str
    detail: str
    suggested_action: str


class RecentBooking(BaseModel):
    id: str
    customer: str
    artisan: str
    service: str
    amount: float
    commission: float
    status: str
    date: datetime
    location: Optional[str] = None


class ActivityType(str, Enum):
    APPLICATION = "application"
    BOOKING = "booking"
    PAYMENT = "payment"
    REGISTRATION = "registration"


class RecentActivityItem(BaseModel):
    action: str
    user: str
    time: str
    type: ActivityType


class DashboardStatsResponse(BaseModel):
    """Four stat cards for the selected timeframe"""

    timeframe: Timeframe
    window_start: datetime
    window_end: datetime
    metrics: List[DashboardMetric]
