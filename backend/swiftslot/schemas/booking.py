"""Booking request and response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import StandardizedModel, StrictRequestModel, UTCInstant
from .vendor import VendorSummary


class BookingCreate(StrictRequestModel):
    """
    Booking request.

    Fields are optional at the schema level so missing values are reported by
    the booking service as a validation error rather than a 422 from FastAPI.
    Naive datetimes are interpreted as UTC.
    """

    vendor_id: Optional[str] = Field(default=None, max_length=26)
    start_time_utc: Optional[datetime] = None
    end_time_utc: Optional[datetime] = None


class BookingResponse(StandardizedModel):
    id: str
    vendor_id: str
    start_time_utc: UTCInstant
    end_time_utc: UTCInstant
    status: str
    created_at: UTCInstant


class BookingDetailResponse(BookingResponse):
    vendor: VendorSummary
    start_time_local: str
    end_time_local: str
    buyer_id: str
    paid_at: Optional[UTCInstant] = None
    cancelled_at: Optional[UTCInstant] = None
