from pydantic import BaseModel, Field, HttpUrl
from typing import List, Optional
from datetime import datetime
from enum import Enum


class ArtisanStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ArtisanExperience(str, Enum):
    ONE_TO_TWO = "1-2"
    THREE_TO_FIVE = "3-5"
    SIX_TO_TEN = "6-10"
    TEN_PLUS = "10+"


class ArtisanProfile(BaseModel):
    id: str
    user_id: str
    category_id: Optional[str] = None
    experience: Optional[str] = None
    description: Optional[str] = None
    hourly_rate: Optional[float] = None
    location: Optional[str] = None
    skills: List[str] = []
    portfolio: List[str] = []
    certifications: List[str] = []
    status: ArtisanStatus = ArtisanStatus.PENDING
    is_available: bool = True
    created_at: datetime


class ArtisanDisplay(BaseModel):
    """Denormalized artisan view: profile joined with its user and category rows"""

    id: str
    name: str
    email: Optional[str] = None
    phone: str = "Not provided"
    category: str = "Not specified"
    location: Optional[str] = None
    experience: Optional[str] = None
    hourly_rate: Optional[float] = None
    created_at: Optional[datetime] = None


# =====================================
# Application / self-service profile models
# =====================================


class ArtisanApplication(BaseModel):
    category: str = Field(..., min_length=1)  # category name, as listed by GET /categories
    experience: ArtisanExperience
    hourly_rate: float = Field(..., gt=0)
    description: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    skills: List[str] = []
    # already hosted files; uploads are not handled here
    portfolio: List[HttpUrl] = Field(default_factory=list, max_length=5)
    certifications: List[HttpUrl] = Field(default_factory=list, max_length=5)


class ArtisanProfileUpdate(BaseModel):
    experience: Optional[ArtisanExperience] = None
    hourly_rate: Optional[float] = Field(None, gt=0)
    description: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1)
    skills: Optional[List[str]] = None
    portfolio: Optional[List[HttpUrl]] = Field(None, max_length=5)
    certifications: Optional[List[HttpUrl]] = Field(None, max_length=5)


class AvailabilityUpdate(BaseModel):
    is_available: bool


class ArtisanProfileResponse(ArtisanProfile):
    category: str = "Not specified"
