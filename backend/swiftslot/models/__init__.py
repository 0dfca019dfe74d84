# backend/swiftslot/models/__init__.py
"""
SQLAlchemy models for SwiftSlot.

Importing this package registers every table on ``Base.metadata``.
"""

from .booking import Booking, BookingSlot, BookingStatus
from .idempotency import IdempotencyRecord
from .payment import Payment, PaymentStatus
from .vendor import Vendor

__all__ = [
    "Booking",
    "BookingSlot",
    "BookingStatus",
    "IdempotencyRecord",
    "Payment",
    "PaymentStatus",
    "Vendor",
]
