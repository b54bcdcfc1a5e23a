from supabase import AsyncClient
from app.models.admin.admin_artisan_models import PaginatedPendingArtisansResponse, PendingArtisanResponse
from app.models.artisan_models import ArtisanProfile, ArtisanStatus
from app.services.ledger_joins import LedgerJoinLoader, join_artisan
from app.custom_error import NotFoundError, ServerError
from app.utils.identifiers import validate_record_id
from app.utils.time_utils import parse_timestamp
import logging
import math

logger = logging.getLogger(__name__)


class AdminArtisanService:
    def __init__(self, supabase_client: AsyncClient):
        self.supabase_client = supabase_client
        self.joins = LedgerJoinLoader(supabase_client)

    # =====================================
    # APPLICATION REVIEW QUEUE
    # =====================================

    async def get_pending_artisans(self, page: int = 1, limit: int = 10) -> PaginatedPendingArtisansResponse:
        """Pending applications, newest first, with the applicant's contact details and category"""
        try:
            offset = (page - 1) * limit

            def pending_query():
                return self.supabase_client.table("artisans").select("*", count="exact").eq("status", ArtisanStatus.PENDING.value)

            count_result = await pending_query().limit(1).execute()
            total = count_result.count if count_result.count else 0

            # a range past the last row is a 416 from PostgREST, not an empty page
            artisan_rows = []
            if offset < total:
                result = await pending_query().order("created_at", desc=True).range(offset, offset + limit - 1).execute()
                artisan_rows = result.data or []

            lookups = await self.joins.load_for_artisans(artisan_rows)

            pending_artisans = []
            for row in artisan_rows:
                artisan = join_artisan(row["id"], lookups)
                pending_artisans.append(
                    PendingArtisanResponse(
                        **artisan.model_dump(),
                        applied_date=parse_timestamp(row["created_at"]).date().isoformat(),
                    )
                )

            total_pages = math.ceil(total / limit) if total > 0 else 1

            return PaginatedPendingArtisansResponse(
                artisans=pending_artisans,
                total=total,
                page=page,
                limit=limit,
                total_pages=total_pages,
            )

        except Exception as e:
            logger.error(f"Error fetching pending artisans: {str(e)}")
            raise ServerError(f"Failed to fetch pending artisans: {str(e)}")

    # --------------------------------------------------------------

    async def _set_status(self, artisan_id: str, status: ArtisanStatus) -> ArtisanProfile:
        """Single conditional write: the row is updated in place and returned, no read-modify-write"""
        artisan_id = validate_record_id(artisan_id, "artisan")

        try:
            result = await self.supabase_client.table("artisans").update({"status": status.value}).eq("id", artisan_id).execute()

            if not result.data:
                raise NotFoundError("Artisan not found")

            logger.info(f"✅ Artisan {artisan_id} marked as {status.value}")
            return ArtisanProfile(**result.data[0])

        except Exception as e:
            # store failures reach the caller unchanged, same as NotFoundError
            logger.error(f"Error updating artisan status: {str(e)}")
            raise

    async def approve_artisan(self, artisan_id: str) -> ArtisanProfile:
        return await self._set_status(artisan_id, ArtisanStatus.APPROVED)

    async def reject_artisan(self, artisan_id: str) -> ArtisanProfile:
        return await self._set_status(artisan_id, ArtisanStatus.REJECTED)
