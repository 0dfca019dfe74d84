"""
Payment model for the mock payment provider.

One Payment per Booking. The reference is the only identifier shared with the
external provider; its webhook notifications are matched on it.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import JSON, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import Mapped, mapped_column, relationship

from swiftslot.core.ulid_helper import generate_ulid
from swiftslot.database import Base

from .types import UTCDateTime, now_utc

if TYPE_CHECKING:
    from .booking import Booking


class PaymentStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class Payment(Base):
    """Provider-side payment attempt for a booking."""

    __tablename__ = "payments"
    __table_args__ = (UniqueConstraint("booking_id", name="uq_payments_booking_id"),)

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    booking_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False
    )
    reference: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.PENDING.value
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    raw_event_json: Mapped[dict[str, Any]] = mapped_column(
        MutableDict.as_mutable(JSONB(astext_type=Text()).with_variant(JSON(), "sqlite")),
        nullable=False,
        default=dict,
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=now_utc)
    updated_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), onupdate=now_utc)

    booking: Mapped["Booking"] = relationship("Booking", back_populates="payment")

    def __repr__(self) -> str:
        return f"<Payment(booking_id={self.booking_id}, ref={self.reference}, status={self.status})>"

    def record_event(self, name: str, payload: dict[str, Any]) -> None:
        """Append a provider event to the audit log."""
        events = list(self.raw_event_json.get("events", []))
        events.append({"name": name, "recorded_at": now_utc().isoformat(), "payload": payload})
        self.raw_event_json["events"] = events
