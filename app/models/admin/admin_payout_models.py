from pydantic import BaseModel
from datetime import datetime

# =====================================
# PAYOUT / REVENUE RESPONSE MODELS
# =====================================


class PendingPayoutsResponse(BaseModel):
    """Net amount owed to artisans for paid bookings not yet paid out"""

    total: float
    artisans: int  # distinct artisans with at least one pending payout
    next_payout_date: datetime


class ProcessPayoutsResponse(BaseModel):
    success: bool
    processed: int  # rows moved pending -> processed by this call
    total: float  # pending payout total remaining after the run
    processed_at: datetime


class RevenueSummaryResponse(BaseModel):
    """All-time totals over paid bookings (total_revenue = commission_earned + artisan_payouts)"""

    total_revenue: float
    commission_earned: float
    artisan_payouts: float
