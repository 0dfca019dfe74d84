# backend/swiftslot/repositories/factory.py
"""
Repository Factory for SwiftSlot

Provides centralized creation of repository instances so services and
tests share one construction path.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .booking_repository import BookingRepository
    from .idempotency_repository import IdempotencyRepository
    from .payment_repository import PaymentRepository
    from .vendor_repository import VendorRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_vendor_repository(db: Session) -> "VendorRepository":
        from .vendor_repository import VendorRepository

        return VendorRepository(db)

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_payment_repository(db: Session) -> "PaymentRepository":
        from .payment_repository import PaymentRepository

        return PaymentRepository(db)

    @staticmethod
    def create_idempotency_repository(db: Session) -> "IdempotencyRepository":
        from .idempotency_repository import IdempotencyRepository

        return IdempotencyRepository(db)
