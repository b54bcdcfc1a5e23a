from pydantic import BaseModel
from typing import List
from app.models.artisan_models import ArtisanDisplay

# =====================================
# Artisan application review models
# =====================================


class PendingArtisanResponse(ArtisanDisplay):
    """Pending application card for the admin review queue"""

    applied_date: str  # "YYYY-MM-DD"


class PaginatedPendingArtisansResponse(BaseModel):
    artisans: List[PendingArtisanResponse]
    total: int
    page: int
    limit: int
    total_pages: int
