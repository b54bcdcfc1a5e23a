from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from contextlib import asynccontextmanager
from app.utils.supabase_client_handlers import create_supabase_client, close_supabase_client
from app.configs.app_settings import settings
from app.routes.admin.admin_dashboard_routes import admin_dashboard_router
from app.routes.admin.admin_payout_routes import admin_payout_router
from app.routes.admin.admin_artisan_routes import admin_artisan_router
from app.routes.admin.admin_settings_routes import admin_settings_router
from app.routes.artisan_routes import artisan_router
from app.routes.artisan_earnings_routes import artisan_earnings_router
from app.routes.booking_routes import booking_router
from app.routes.category_routes import category_router
from app.routes.clerk_webhook_routes import clerk_webhook_router
from app.routes.stripe_webhook_route import stripe_webhook_router
import logging

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # before yield = code to run during startup
    await create_supabase_client()
    logger.info("✅ Supabase async client initialized")

    yield
    # after yield = code to run during shutdown
    await close_supabase_client()
    logger.info("✅ Supabase client closed")


app = FastAPI(title="ArtisanHub API", version="1.0.0", lifespan=lifespan)


# Request body / query / path validation failures come back as 400 with the pydantic error list
@app.exception_handler(RequestValidationError)
async def custom_request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors"""
    logger.warning(f"Request validation failed on {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"detail": "Validation error", "errors": jsonable_encoder(exc.errors())})


app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CLIENT_DOMAIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(admin_dashboard_router, prefix=settings.API_V1_STR)
app.include_router(admin_payout_router, prefix=settings.API_V1_STR)
app.include_router(admin_artisan_router, prefix=settings.API_V1_STR)
app.include_router(admin_settings_router, prefix=settings.API_V1_STR)
app.include_router(artisan_router, prefix=settings.API_V1_STR)
app.include_router(artisan_earnings_router, prefix=settings.API_V1_STR)
app.include_router(booking_router, prefix=settings.API_V1_STR)
app.include_router(category_router, prefix=settings.API_V1_STR)
app.include_router(clerk_webhook_router, prefix=settings.API_V1_STR)
app.include_router(stripe_webhook_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    return {"message": "Welcome to ArtisanHub API"}
