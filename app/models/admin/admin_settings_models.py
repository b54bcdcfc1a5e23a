from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

# =====================================
# PLATFORM SETTINGS MODELS
# =====================================

# keys of the platform_settings table rows
COMMISSION_SETTINGS_KEY = "commission"
PLATFORM_SETTINGS_KEY = "platform"


class CommissionSettings(BaseModel):
    """Commission percentages taken as platform fee"""

    default_rate: float = Field(default=15, ge=0, le=100)
    premium_artisans: float = Field(default=12, ge=0, le=100)
    new_artisans: float = Field(default=10, ge=0, le=100)


class PlatformSettings(BaseModel):
    platform_name: str = Field(default="ArtisanHub", min_length=1, max_length=100)
    support_email: EmailStr = "support@artisanhub.com"
    max_bookings_per_artisan: int = Field(default=10, ge=1)
    auto_approval_settings: str = "Configure automatic approval criteria..."


class CommissionSettingsResponse(CommissionSettings):
    updated_at: Optional[datetime] = None  # None while the defaults have never been saved


class PlatformSettingsResponse(PlatformSettings):
    updated_at: Optional[datetime] = None


# partial updates: only the fields sent are merged over the stored values, then validated as a whole


class CommissionSettingsUpdate(BaseModel):
    default_rate: Optional[float] = None
    premium_artisans: Optional[float] = None
    new_artisans: Optional[float] = None


class PlatformSettingsUpdate(BaseModel):
    platform_name: Optional[str] = None
    support_email: Optional[str] = None
    max_bookings_per_artisan: Optional[int] = None
    auto_approval_settings: Optional[str] = None
