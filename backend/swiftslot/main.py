# backend/swiftslot/main.py
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.constants import BRAND_NAME
from .database import Base, engine
from .errors import register_error_handlers
from .routes.v1 import bookings as bookings_v1
from .routes.v1 import health as health_v1
from .routes.v1 import payments as payments_v1
from .routes.v1 import prometheus as prometheus_v1
from .routes.v1 import vendors as vendors_v1

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

API_TITLE = f"{BRAND_NAME} API"
API_VERSION = "1.0.0"
API_DESCRIPTION = "Slot reservation and booking engine with a mock payment provider"


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(
        f"Environment: {settings.environment}, business timezone: {settings.business_timezone}"
    )

    if settings.auto_create_tables:
        # Local development convenience; deployed databases are migrated with Alembic
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ensured")

    yield

    logger.info(f"{BRAND_NAME} API shutting down...")
    engine.dispose()


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST"],
    allow_headers=["*"],
)
logger.info("CORS allow_origins=%s", settings.cors_origins)

# Create API v1 router
api_v1 = APIRouter(prefix="/api/v1")

api_v1.include_router(vendors_v1.router, prefix="/vendors")
api_v1.include_router(bookings_v1.router, prefix="/bookings")
api_v1.include_router(payments_v1.router, prefix="/payments")

app.include_router(api_v1)
app.include_router(health_v1.router, prefix="/health")
app.include_router(prometheus_v1.router, prefix="/metrics")


@app.get("/")
def read_root() -> dict[str, str]:
    """Root endpoint - API information"""
    return {
        "message": f"Welcome to the {BRAND_NAME} API",
        "version": API_VERSION,
        "docs": "/docs",
    }
