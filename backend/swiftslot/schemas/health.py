"""Health check response schema."""

from typing import Dict

from .base import StandardizedModel


class HealthResponse(StandardizedModel):
    status: str
    service: str
    environment: str
    timezone: str
    timestamp: str
    db_pool: Dict[str, int]
