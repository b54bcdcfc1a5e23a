from datetime import timedelta
import pytest

from app.custom_error import NotFoundError, ServerError, ValidationError
from app.models.artisan_models import ArtisanStatus
from app.services.admin.admin_artisan_services import AdminArtisanService
from tests.fake_supabase import StoreUnavailable
from tests.factories import FIXED_NOW, add_artisan, add_category, add_user, new_id


class TestPendingArtisans:
    @pytest.mark.asyncio
    async def test_pending_queue_is_joined_and_paginated(self, fake_db):
        carpentry = add_category(fake_db, "Carpentry")
        for days, first_name in [(3, "Ifeoma"), (2, "Obi"), (1, "Zainab")]:
            user = add_user(fake_db, first_name, "Nwosu", phone="+2348000000000")
            add_artisan(fake_db, user["id"], FIXED_NOW - timedelta(days=days), status="pending", category_id=carpentry["id"])
        add_artisan(fake_db, add_user(fake_db)["id"], FIXED_NOW, status="approved")

        result = await AdminArtisanService(fake_db).get_pending_artisans(page=1, limit=2)

        assert result.total == 3
        assert result.total_pages == 2
        assert [a.name for a in result.artisans] == ["Zainab Nwosu", "Obi Nwosu"]
        assert result.artisans[0].category == "Carpentry"
        assert result.artisans[0].phone == "+2348000000000"
        assert result.artisans[0].applied_date == "2024-06-14"

    @pytest.mark.asyncio
    async def test_missing_user_and_category_use_placeholders(self, fake_db):
        add_artisan(fake_db, new_id(), FIXED_NOW, status="pending")

        result = await AdminArtisanService(fake_db).get_pending_artisans()

        (artisan,) = result.artisans
        assert artisan.name == "Unknown"
        assert artisan.phone == "Not provided"
        assert artisan.category == "Not specified"

    @pytest.mark.asyncio
    async def test_empty_queue(self, fake_db):
        result = await AdminArtisanService(fake_db).get_pending_artisans()

        assert result.artisans == []
        assert result.total_pages == 1

    @pytest.mark.asyncio
    async def test_listing_failure_is_reported_as_server_error(self, fake_db):
        fake_db.failing_tables.add("artisans")

        with pytest.raises(ServerError):
            await AdminArtisanService(fake_db).get_pending_artisans()

    @pytest.mark.asyncio
    async def test_page_past_the_end_is_empty(self, fake_db):
        for days in (1, 2, 3):
            add_artisan(fake_db, add_user(fake_db)["id"], FIXED_NOW - timedelta(days=days), status="pending")

        result = await AdminArtisanService(fake_db).get_pending_artisans(page=5, limit=2)

        assert result.artisans == []
        assert result.total == 3
        assert result.total_pages == 2


class TestApproveReject:
    @pytest.mark.asyncio
    async def test_approve_and_reject(self, fake_db):
        first = add_artisan(fake_db, new_id(), FIXED_NOW, status="pending")
        second = add_artisan(fake_db, new_id(), FIXED_NOW, status="pending")
        service = AdminArtisanService(fake_db)

        approved = await service.approve_artisan(first["id"])
        rejected = await service.reject_artisan(second["id"])

        assert approved.status == ArtisanStatus.APPROVED
        assert rejected.status == ArtisanStatus.REJECTED
        assert fake_db.tables["artisans"][0]["status"] == "approved"

    @pytest.mark.asyncio
    async def test_unknown_artisan(self, fake_db):
        with pytest.raises(NotFoundError):
            await AdminArtisanService(fake_db).approve_artisan(new_id())

    @pytest.mark.asyncio
    async def test_malformed_id_never_reaches_the_store(self, fake_db):
        with pytest.raises(ValidationError):
            await AdminArtisanService(fake_db).reject_artisan("not-a-uuid")
        assert fake_db.calls == []

    @pytest.mark.asyncio
    async def test_store_failure_propagates_unchanged(self, fake_db):
        fake_db.failing_tables.add("artisans")

        with pytest.raises(StoreUnavailable):
            await AdminArtisanService(fake_db).approve_artisan(new_id())
