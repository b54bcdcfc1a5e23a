from supabase import acreate_client, AsyncClient
from supabase.lib.client_options import AsyncClientOptions
from app.configs.app_settings import settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# One AsyncClient is shared by the whole process:
# 1. lifespan startup runs create_supabase_client(), which builds the client once and stores it in _supabase_client
# 2. every request gets that same instance through the get_supabase_client() dependency
# 3. tests replace the dependency with an in-memory fake via app.dependency_overrides


_supabase_client: Optional[AsyncClient] = None


async def create_supabase_client() -> AsyncClient:
    """Create the async supabase client for the ledger tables - only called once during startup"""
    global _supabase_client
    if _supabase_client is None:
        options = AsyncClientOptions(schema=settings.SUPABASE_SCHEMA)
        _supabase_client = await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_KEY, options=options)
        logger.info(f"Supabase client created for schema '{settings.SUPABASE_SCHEMA}'")
    return _supabase_client


async def get_supabase_client() -> AsyncClient:
    """Dependency function to get the supabase client"""
    if _supabase_client is None:
        raise RuntimeError("Supabase client not initialized. Call create_supabase_client() during startup.")
    return _supabase_client


async def close_supabase_client():
    """Drop the shared client reference during shutdown"""
    global _supabase_client
    if _supabase_client:
        # the async client holds no pooled connections of its own, resetting the reference is enough
        _supabase_client = None
        logger.info("Supabase client released")
