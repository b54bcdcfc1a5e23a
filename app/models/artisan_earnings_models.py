from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class MonthlyEarnings(BaseModel):
    month: str  # "YYYY-MM" of the booking's created_at
    earnings: float
    jobs: int


class EarningsSummaryResponse(BaseModel):
    total_earnings: float  # net of platform fee
    total_jobs: int
    monthly: List[MonthlyEarnings]


class EarningsHistoryItem(BaseModel):
    id: str
    service: str
    date: Optional[str] = None
    gross: float
    commission: float
    net: float
    payout_status: str
    processed_at: Optional[datetime] = None
    created_at: datetime


class PaginationMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class EarningsHistoryResponse(BaseModel):
    data: List[EarningsHistoryItem]
    meta: PaginationMeta


class ReviewItem(BaseModel):
    id: str
    customer_id: str
    service: str
    rating: float
    review: Optional[str] = None
    created_at: datetime


class ReviewsResponse(BaseModel):
    data: List[ReviewItem]
    meta: PaginationMeta
    average_rating: float  # mean over the returned page only


class ArtisanBookingItem(BaseModel):
    id: str
    customer_id: str
    service: str
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    total: float
    status: str
    payment_status: str
    created_at: datetime
