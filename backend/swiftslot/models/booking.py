# backend/swiftslot/models/booking.py
"""
Booking and slot-claim models for SwiftSlot.

A Booking covers a contiguous UTC range on one vendor. Each 30-minute
increment of that range is claimed by one BookingSlot row, and the unique
(vendor_id, slot_start_utc) constraint on those rows is what prevents
double-booking. Bookings and their claims are always written together.
"""

from datetime import datetime
from enum import Enum
import logging
from typing import TYPE_CHECKING, Any, List, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from swiftslot.core.constants import ANONYMOUS_BUYER_ID
from swiftslot.core.ulid_helper import generate_ulid
from swiftslot.database import Base

from .types import UTCDateTime, now_utc

if TYPE_CHECKING:
    from .payment import Payment
    from .vendor import Vendor

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"  # Slots claimed, awaiting payment
    PAID = "paid"  # Payment provider confirmed the charge
    CANCELLED = "cancelled"  # Released before payment


ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.PAID, BookingStatus.CANCELLED}),
    BookingStatus.PAID: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


class Booking(Base):
    """A buyer's hold on a contiguous range of one vendor's slots."""

    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    vendor_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("vendors.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    buyer_id: Mapped[str] = mapped_column(String(64), nullable=False, default=ANONYMOUS_BUYER_ID)
    start_time_utc: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    end_time_utc: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BookingStatus.PENDING.value, index=True
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=now_utc)
    updated_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), onupdate=now_utc)
    paid_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    vendor: Mapped["Vendor"] = relationship("Vendor", back_populates="bookings")
    slots: Mapped[List["BookingSlot"]] = relationship(
        "BookingSlot",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingSlot.slot_start_utc",
    )
    payment: Mapped[Optional["Payment"]] = relationship(
        "Payment", back_populates="booking", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'paid', 'cancelled')",
            name="ck_bookings_status",
        ),
        CheckConstraint("end_time_utc > start_time_utc", name="ck_bookings_time_order"),
        Index("ix_bookings_vendor_start", "vendor_id", "start_time_utc"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.PENDING.value
        if not self.buyer_id:
            self.buyer_id = ANONYMOUS_BUYER_ID

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: vendor={self.vendor_id}, "
            f"range={self.start_time_utc}-{self.end_time_utc}, status={self.status}>"
        )

    def can_transition_to(self, target: BookingStatus) -> bool:
        """Check the booking state machine for ``status -> target``."""
        current = BookingStatus(self.status)
        return target in ALLOWED_TRANSITIONS[current]

    def mark_paid(self) -> None:
        """Move a pending booking to paid."""
        self.status = BookingStatus.PAID.value
        self.paid_at = now_utc()
        logger.info(f"Booking {self.id} marked as paid")

    def cancel(self) -> None:
        """Move a pending booking to cancelled."""
        self.status = BookingStatus.CANCELLED.value
        self.cancelled_at = now_utc()
        logger.info(f"Booking {self.id} cancelled")

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time_utc - self.start_time_utc).total_seconds() // 60)


class BookingSlot(Base):
    """Claim on a single 30-minute slot; unique per (vendor, slot start)."""

    __tablename__ = "booking_slots"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    booking_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    vendor_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("vendors.id", ondelete="RESTRICT"), nullable=False
    )
    slot_start_utc: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=now_utc)

    booking: Mapped["Booking"] = relationship("Booking", back_populates="slots")

    __table_args__ = (
        UniqueConstraint("vendor_id", "slot_start_utc", name="uq_booking_slots_vendor_slot"),
    )

    def __repr__(self) -> str:
        return f"<BookingSlot vendor={self.vendor_id} start={self.slot_start_utc}>"
