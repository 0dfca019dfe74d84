# backend/swiftslot/models/vendor.py
"""Vendor model: the owner of a bookable calendar."""

from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from swiftslot.core.config import settings
from swiftslot.core.ulid_helper import generate_ulid
from swiftslot.database import Base

from .types import UTCDateTime, now_utc

if TYPE_CHECKING:
    from .booking import Booking


class Vendor(Base):
    """A vendor whose calendar is split into fixed 30-minute slots."""

    __tablename__ = "vendors"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    timezone: Mapped[str] = mapped_column(
        String(64), nullable=False, default=lambda: settings.business_timezone
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=now_utc)

    bookings: Mapped[List["Booking"]] = relationship("Booking", back_populates="vendor")

    def __repr__(self) -> str:
        return f"<Vendor {self.id}: {self.name} ({self.timezone})>"
