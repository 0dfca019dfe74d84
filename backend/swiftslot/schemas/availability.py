"""Availability response schemas."""

from typing import List

from .base import StandardizedModel, UTCInstant


class AvailableSlot(StandardizedModel):
    """One free slot: the UTC instant plus its local wall-clock label."""

    start_utc: UTCInstant
    start_local: str


class AvailabilityResponse(StandardizedModel):
    vendor_id: str
    date: str
    timezone: str
    slots: List[AvailableSlot]
