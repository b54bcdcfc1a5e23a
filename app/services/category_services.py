from supabase import AsyncClient
from app.models.category_models import CategoryResponse, PaginatedCategoriesResponse
from app.custom_error import NotFoundError, ServerError, ValidationError
from app.utils.identifiers import validate_record_id
import logging
import math

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, supabase_client: AsyncClient):
        self.supabase_client = supabase_client

    async def get_categories(self, page: int = 1, limit: int = 10) -> PaginatedCategoriesResponse:
        """Active categories by name, the list artisans pick from when they apply"""
        try:
            offset = (page - 1) * limit

            def active_query():
                return self.supabase_client.table("categories").select("*", count="exact").eq("is_active", True)

            count_result = await active_query().limit(1).execute()
            total = count_result.count if count_result.count else 0

            category_rows = []
            if offset < total:
                result = await active_query().order("name").range(offset, offset + limit - 1).execute()
                category_rows = result.data or []

            return PaginatedCategoriesResponse(
                categories=[CategoryResponse(**row) for row in category_rows],
                total=total,
                page=page,
                limit=limit,
                total_pages=math.ceil(total / limit) if total > 0 else 1,
            )

        except Exception as e:
            logger.error(f"Error fetching categories: {str(e)}")
            raise ServerError(f"Failed to fetch categories: {str(e)}")

    # --------------------------------------------------------------

    async def get_category(self, category_id: str) -> CategoryResponse:
        category_id = validate_record_id(category_id, "category")

        try:
            result = await self.supabase_client.table("categories").select("*").eq("id", category_id).execute()
            if not result.data:
                raise NotFoundError(f"Category with ID '{category_id}' not found")

            return CategoryResponse(**result.data[0])

        except Exception as e:
            logger.error(f"Error fetching category {category_id}: {str(e)}")
            if isinstance(e, (NotFoundError, ValidationError)):
                raise e
            raise ServerError(f"Failed to fetch category: {str(e)}")
