from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class CategoryResponse(BaseModel):
    id: str
    name: str
    is_active: bool = True
    created_at: Optional[datetime] = None


class PaginatedCategoriesResponse(BaseModel):
    categories: List[CategoryResponse]
    total: int
    page: int
    limit: int
    total_pages: int
