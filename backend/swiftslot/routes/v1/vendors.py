# backend/swiftslot/routes/v1/vendors.py
"""
Vendor routes - API v1

Endpoints:
    GET / - List vendors ordered by name
    GET /{vendor_id}/availability?date=YYYY-MM-DD - Free slots for one local date
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query

from ...api.dependencies import get_availability_service, get_vendor_service
from ...core.exceptions import DomainException
from ...core.ulid_helper import ULID_PATTERN
from ...errors import handle_domain_exception
from ...schemas.availability import AvailabilityResponse
from ...schemas.vendor import VendorResponse
from ...services.availability_service import AvailabilityService
from ...services.vendor_service import VendorService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["vendors-v1"])


@router.get("", response_model=List[VendorResponse])
async def list_vendors(
    vendor_service: VendorService = Depends(get_vendor_service),
) -> List[VendorResponse]:
    """List every vendor, ordered by name."""
    try:
        return await asyncio.to_thread(vendor_service.list_vendors)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{vendor_id}/availability", response_model=AvailabilityResponse)
async def get_vendor_availability(
    vendor_id: str = Path(..., pattern=ULID_PATTERN, description="Vendor ULID"),
    date: Optional[str] = Query(None, description="Local calendar date, YYYY-MM-DD"),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    """
    List free 30-minute slots for a vendor on one local date.

    This view is advisory; slots are re-checked when a booking is created.
    """
    try:
        return await asyncio.to_thread(
            availability_service.list_available_slots, vendor_id, date or ""
        )
    except DomainException as e:
        handle_domain_exception(e)
