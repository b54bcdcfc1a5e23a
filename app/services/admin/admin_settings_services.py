from supabase import AsyncClient
from pydantic import ValidationError as PydanticValidationError
from app.models.admin.admin_settings_models import (
    COMMISSION_SETTINGS_KEY,
    PLATFORM_SETTINGS_KEY,
    CommissionSettings,
    CommissionSettingsResponse,
    PlatformSettings,
    PlatformSettingsResponse,
)
from app.custom_error import DatabaseError, ServerError, ValidationError
from app.utils.time_utils import Clock, parse_timestamp, to_iso, utc_now
from typing import Optional, Tuple, Type, TypeVar
import logging

logger = logging.getLogger(__name__)

SettingsModel = TypeVar("SettingsModel", CommissionSettings, PlatformSettings)


class AdminSettingsService:
    """Commission and platform settings, stored as one JSON row per key in platform_settings"""

    def __init__(self, supabase_client: AsyncClient, clock: Clock = utc_now):
        self.supabase_client = supabase_client
        self.clock = clock

    # =====================================
    # Internal helpers
    # =====================================

    async def _load(self, key: str, model: Type[SettingsModel]) -> Tuple[SettingsModel, Optional[str]]:
        """Stored value for key, or the model defaults when nothing was saved yet"""
        result = await self.supabase_client.table("platform_settings").select("value, updated_at").eq("key", key).limit(1).execute()

        if not result.data:
            return model(), None

        row = result.data[0]
        # fields added after the row was written pick up their defaults
        return model(**(row.get("value") or {})), row.get("updated_at")

    async def _save(self, key: str, value: SettingsModel) -> str:
        updated_at = to_iso(self.clock())
        record = {"key": key, "value": value.model_dump(mode="json"), "updated_at": updated_at}

        result = await self.supabase_client.table("platform_settings").upsert(record, on_conflict="key").execute()
        if not result.data:
            raise DatabaseError(f"Failed to save {key} settings")

        return result.data[0].get("updated_at") or updated_at

    # =====================================
    # COMMISSION SETTINGS
    # =====================================

    async def get_commission_settings(self) -> CommissionSettingsResponse:
        try:
            commission, updated_at = await self._load(COMMISSION_SETTINGS_KEY, CommissionSettings)
            return CommissionSettingsResponse(
                **commission.model_dump(), updated_at=parse_timestamp(updated_at) if updated_at else None
            )

        except Exception as e:
            logger.error(f"Error fetching commission settings: {str(e)}")
            raise ServerError(f"Failed to fetch commission settings: {str(e)}")

    async def get_default_commission_rate(self) -> float:
        """Rate applied to new bookings"""
        settings = await self.get_commission_settings()
        return settings.default_rate

    async def update_commission_settings(self, update_data: dict) -> CommissionSettingsResponse:
        """Merge a partial update over the current values, validate, persist"""
        try:
            current, _ = await self._load(COMMISSION_SETTINGS_KEY, CommissionSettings)
            try:
                merged = CommissionSettings(**{**current.model_dump(), **update_data})
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid commission settings: {e.errors(include_url=False)}")

            updated_at = await self._save(COMMISSION_SETTINGS_KEY, merged)
            logger.info(f"✅ Commission settings updated: {merged.model_dump()}")

            return CommissionSettingsResponse(**merged.model_dump(), updated_at=parse_timestamp(updated_at))

        except Exception as e:
            logger.error(f"Error updating commission settings: {str(e)}")
            if isinstance(e, (ValidationError, DatabaseError)):
                raise e
            raise ServerError(f"Failed to update commission settings: {str(e)}")

    # =====================================
    # PLATFORM SETTINGS
    # =====================================

    async def get_platform_settings(self) -> PlatformSettingsResponse:
        try:
            platform, updated_at = await self._load(PLATFORM_SETTINGS_KEY, PlatformSettings)
            return PlatformSettingsResponse(**platform.model_dump(), updated_at=parse_timestamp(updated_at) if updated_at else None)

        except Exception as e:
            logger.error(f"Error fetching platform settings: {str(e)}")
            raise ServerError(f"Failed to fetch platform settings: {str(e)}")

    async def update_platform_settings(self, update_data: dict) -> PlatformSettingsResponse:
        try:
            current, _ = await self._load(PLATFORM_SETTINGS_KEY, PlatformSettings)
            try:
                merged = PlatformSettings(**{**current.model_dump(), **update_data})
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid platform settings: {e.errors(include_url=False)}")

            updated_at = await self._save(PLATFORM_SETTINGS_KEY, merged)
            logger.info("✅ Platform settings updated")

            return PlatformSettingsResponse(**merged.model_dump(), updated_at=parse_timestamp(updated_at))

        except Exception as e:
            logger.error(f"Error updating platform settings: {str(e)}")
            if isinstance(e, (ValidationError, DatabaseError)):
                raise e
            raise ServerError(f"Failed to update platform settings: {str(e)}")
