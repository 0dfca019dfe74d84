# backend/swiftslot/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Each request gets service instances bound to its own database session.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from ...services.payment_service import PaymentService
from ...services.vendor_service import VendorService
from .database import get_db


def get_vendor_service(db: Session = Depends(get_db)) -> VendorService:
    return VendorService(db)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """
    Get booking service instance.

    Args:
        db: Database session

    Returns:
        BookingService using the wall clock
    """
    return BookingService(db)


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    return PaymentService(db)
