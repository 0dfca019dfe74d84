# backend/swiftslot/api/dependencies/__init__.py
"""
Centralized dependency injection for FastAPI routes.

Usage:
    from swiftslot.api.dependencies import get_booking_service
"""

from .database import get_db
from .services import (
    get_availability_service,
    get_booking_service,
    get_payment_service,
    get_vendor_service,
)

__all__ = [
    "get_db",
    "get_vendor_service",
    "get_availability_service",
    "get_booking_service",
    "get_payment_service",
]
