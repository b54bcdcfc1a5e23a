import os

# Settings() is built at import time and these have no defaults
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-service-role-key")
os.environ.setdefault("CLERK_JWKS_URL", "https://clerk.example.com/.well-known/jwks.json")
os.environ.setdefault("CLERK_WEBHOOK_SECRET", "whsec_dGVzdC1jbGVyay1zZWNyZXQ=")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_not_real")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_not_real")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from httpx import AsyncClient, ASGITransport
import pytest
import pytest_asyncio

from tests.fake_supabase import FakeSupabase
from tests.factories import FIXED_NOW


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase(now=FIXED_NOW)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def signed_in() -> dict:
    """Clerk user id the route tests act as; tests swap it to change identity"""
    return {"clerk_user_id": "user_admin"}


@pytest_asyncio.fixture
async def api_client(fake_db, clock, signed_in):
    from app.main import app
    from app.utils.supabase_client_handlers import get_supabase_client
    from app.utils.time_utils import get_clock
    from app.utils.user_auth import get_current_clerk_user_id

    app.dependency_overrides[get_supabase_client] = lambda: fake_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_current_clerk_user_id] = lambda: signed_in["clerk_user_id"]

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
