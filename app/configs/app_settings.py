from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Environment driven configuration; required fields have no default and must be set in the environment or .env"""

    # Supabase
    SUPABASE_URL: str
    SUPABASE_KEY: str
    SUPABASE_SCHEMA: str = "public"

    # Clerk webhook secret
    CLERK_WEBHOOK_SECRET: Optional[str] = None

    # Clerk JWT settings
    CLERK_JWKS_URL: str

    # API Settings
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # Stripe settings
    STRIPE_SECRET_KEY: str
    STRIPE_WEBHOOK_SECRET: str

    # domains
    CLIENT_DOMAIN: str = "http://127.0.0.1:3000"

    # Dashboard / payout tuning
    STALE_APPLICATION_HOURS: int = 48  # pending artisan applications older than this raise an alert
    PAYOUT_INTERVAL_DAYS: int = 7  # next payout run is scheduled this many days out
    TOP_ARTISANS_LIMIT: int = 3
    POPULAR_CATEGORIES_LIMIT: int = 4
    DEFAULT_PAGE_SIZE: int = 10

    # Booking amounts
    TAX_RATE_PERCENT: float = 0.0

    class Config:
        # priority handling, the order is:
        # 1. System environment variables (highest priority)
        # 2. .env file (if it exists)
        # 3. Default values in the Settings class (lowest priority)
        env_file = ".env"
        case_sensitive = True


# throughout the project, no matter how many files do "from app.configs.app_settings import settings"
# the Settings() initialization only runs once per python process. Everything else uses the cached module.
settings = Settings()
