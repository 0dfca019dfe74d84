# backend/swiftslot/routes/v1/bookings.py
"""
Booking routes - API v1

All business logic delegated to BookingService.

Endpoints:
    POST / - Create a booking (optional Idempotency-Key header)
    GET /{booking_id} - Booking details with local times
    POST /{booking_id}/cancel - Cancel a pending booking
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Path, status

from ...api.dependencies import get_booking_service
from ...core.constants import IDEMPOTENCY_KEY_HEADER, MAX_IDEMPOTENCY_KEY_LENGTH
from ...core.exceptions import DomainException
from ...core.ulid_helper import ULID_PATTERN
from ...errors import handle_domain_exception
from ...schemas.booking import BookingCreate, BookingDetailResponse, BookingResponse
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bookings-v1"])


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    idempotency_key: Optional[str] = Header(
        None, alias=IDEMPOTENCY_KEY_HEADER, max_length=MAX_IDEMPOTENCY_KEY_LENGTH
    ),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """
    Reserve the 30-minute slots covering [start_time_utc, end_time_utc).

    Retrying with the same Idempotency-Key and body returns the original
    response; reusing the key with a different body is rejected.
    """
    try:
        return await asyncio.to_thread(
            booking_service.create_booking,
            booking_data.vendor_id,
            booking_data.start_time_utc,
            booking_data.end_time_utc,
            idempotency_key.strip() if idempotency_key else None,
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{booking_id}", response_model=BookingDetailResponse)
async def get_booking(
    booking_id: str = Path(..., pattern=ULID_PATTERN, description="Booking ULID"),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingDetailResponse:
    """Get full booking details."""
    try:
        return await asyncio.to_thread(booking_service.get_booking, booking_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: str = Path(..., pattern=ULID_PATTERN, description="Booking ULID"),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Cancel a pending booking, releasing its slots."""
    try:
        return await asyncio.to_thread(booking_service.cancel_booking, booking_id)
    except DomainException as e:
        handle_domain_exception(e)
