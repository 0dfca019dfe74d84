"""Vendor response schemas."""

from .base import StandardizedModel, UTCInstant


class VendorSummary(StandardizedModel):
    id: str
    name: str
    timezone: str


class VendorResponse(VendorSummary):
    created_at: UTCInstant
