# backend/swiftslot/routes/v1/health.py
"""
Health check endpoints for monitoring and load balancer probes.
"""

from datetime import datetime, timezone
import logging

from fastapi import APIRouter

from ...core.config import settings
from ...core.constants import BRAND_NAME
from ...database import get_db_pool_status
from ...schemas.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Returns basic health status including service info, environment and
    connection pool statistics. Does not query the database.
    """
    return HealthResponse(
        status="healthy",
        service=f"{BRAND_NAME.lower()}-api",
        environment=settings.environment,
        timezone=settings.business_timezone,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        db_pool=get_db_pool_status(),
    )
