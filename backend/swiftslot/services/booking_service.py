# backend/swiftslot/services/booking_service.py
"""
Booking Service for SwiftSlot

Handles the reservation engine:
- Validating that a requested range is a whole number of 30-minute slots
- Idempotent replay of keyed requests
- Same-day lead time in the vendor's local time
- Claiming slots atomically (the unique constraint on claims is the only
  double-booking guard)
- Reading and cancelling bookings
"""

from __future__ import annotations

from datetime import datetime, timedelta
import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import IDEMPOTENCY_SCOPE_BOOKING
from ..core.exceptions import (
    BusinessRuleException,
    LeadTimeViolationException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    SlotConflictException,
    ValidationException,
)
from ..models.booking import Booking, BookingStatus
from ..models.types import now_utc
from ..models.vendor import Vendor
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import BookingDetailResponse, BookingResponse
from ..schemas.vendor import VendorSummary
from .base import BaseService
from .idempotency_service import IdempotencyService
from .timezone_service import TimezoneService

if TYPE_CHECKING:
    from ..repositories.booking_repository import BookingRepository
    from ..repositories.vendor_repository import VendorRepository

logger = logging.getLogger(__name__)

CREATE_FAILED_MESSAGE = "Failed to create booking"

# Which unique constraint an IntegrityError came from
_SLOT_CLAIM = "slot_claim"
_LEDGER = "ledger"


class BookingService(BaseService):
    """
    Service layer for booking operations.

    ``clock`` returns the current UTC instant; tests inject a fixed one.
    """

    repository: "BookingRepository"
    vendor_repository: "VendorRepository"

    def __init__(
        self,
        db: Session,
        clock: Optional[Callable[[], datetime]] = None,
        idempotency_service: Optional[IdempotencyService] = None,
    ):
        super().__init__(db)
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.vendor_repository = RepositoryFactory.create_vendor_repository(db)
        self.idempotency_service = idempotency_service or IdempotencyService(db)
        self.clock = clock or now_utc

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self,
        vendor_id: Optional[str],
        start_time_utc: Optional[datetime],
        end_time_utc: Optional[datetime],
        idempotency_key: Optional[str] = None,
    ) -> BookingResponse:
        """
        Reserve every 30-minute slot in ``[start_time_utc, end_time_utc)`` for a vendor.

        Returns:
            The booking in ``pending`` state, or the stored response for a
            replayed idempotency key

        Raises:
            ValidationException: missing fields or bad range
            IdempotencyKeyReuseException: key already used with a different payload
            NotFoundException: vendor does not exist
            LeadTimeViolationException: same-day start too close to now
            SlotConflictException: a requested slot is already claimed
            ServiceException: unexpected storage failure
        """
        vendor_id, start, end = self._validate_range(vendor_id, start_time_utc, end_time_utc)
        request_payload: Dict[str, Any] = {
            "vendor_id": vendor_id,
            "start_time_utc": start,
            "end_time_utc": end,
        }

        if idempotency_key:
            cached = self.idempotency_service.lookup(
                idempotency_key, IDEMPOTENCY_SCOPE_BOOKING, request_payload
            )
            if cached is not None:
                prometheus_metrics.inc_idempotent_replay(IDEMPOTENCY_SCOPE_BOOKING)
                prometheus_metrics.inc_booking("replayed")
                return BookingResponse.model_validate(cached)

        vendor = self._get_vendor(vendor_id)
        self._validate_lead_time(start, vendor)

        slot_starts = TimezoneService.slot_starts(start, end)
        self.log_operation(
            "create_booking",
            vendor_id=vendor.id,
            start_utc=start.isoformat(),
            slot_count=len(slot_starts),
            keyed=bool(idempotency_key),
        )

        try:
            with self.repository.transaction():
                booking = self.repository.create_pending_booking(
                    vendor_id=vendor.id, start_time_utc=start, end_time_utc=end
                )
                self.repository.claim_slots(booking, slot_starts)
                response = BookingResponse.model_validate(booking)
                if idempotency_key:
                    self.idempotency_service.stage_record(
                        idempotency_key,
                        IDEMPOTENCY_SCOPE_BOOKING,
                        request_payload,
                        response.model_dump(mode="json"),
                    )
        except IntegrityError as exc:
            return self._handle_integrity_error(exc, idempotency_key, request_payload, slot_starts)
        except SQLAlchemyError as exc:
            self.logger.error(f"Storage error creating booking for vendor {vendor.id}: {exc}")
            raise ServiceException(CREATE_FAILED_MESSAGE) from exc

        prometheus_metrics.inc_booking("created")
        self.logger.info(f"Booking {response.id} created with {len(slot_starts)} slot(s)")
        return response

    @BaseService.measure_operation("get_booking")
    def get_booking(self, booking_id: str) -> BookingDetailResponse:
        """Fetch a booking with its vendor and local wall-clock labels."""
        booking = self._get_booking_or_404(booking_id)
        vendor = booking.vendor
        return BookingDetailResponse(
            id=booking.id,
            vendor_id=booking.vendor_id,
            vendor=VendorSummary.model_validate(vendor),
            buyer_id=booking.buyer_id,
            start_time_utc=booking.start_time_utc,
            end_time_utc=booking.end_time_utc,
            start_time_local=TimezoneService.utc_to_local_clock(
                booking.start_time_utc, vendor.timezone
            ),
            end_time_local=TimezoneService.utc_to_local_clock(booking.end_time_utc, vendor.timezone),
            status=booking.status,
            created_at=booking.created_at,
            paid_at=booking.paid_at,
            cancelled_at=booking.cancelled_at,
        )

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(self, booking_id: str) -> BookingResponse:
        """
        Cancel a pending booking and release its slot claims.

        Raises:
            NotFoundException: booking does not exist
            BusinessRuleException: booking is not pending
        """
        try:
            with self.repository.transaction():
                booking = self.repository.get_for_update(booking_id)
                if booking is None:
                    raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")
                if not booking.can_transition_to(BookingStatus.CANCELLED):
                    raise BusinessRuleException(
                        f"Booking cannot be cancelled from status '{booking.status}'",
                        code="INVALID_BOOKING_STATE",
                        details={"status": booking.status},
                    )
                booking.cancel()
                released = self.repository.release_slots(booking.id)
                response = BookingResponse.model_validate(booking)
        except SQLAlchemyError as exc:
            self.logger.error(f"Storage error cancelling booking {booking_id}: {exc}")
            raise ServiceException("Failed to cancel booking") from exc

        prometheus_metrics.inc_booking("cancelled")
        self.log_operation("cancel_booking", booking_id=booking_id, released=released)
        return response

    # Validation helpers

    @staticmethod
    def _validate_range(
        vendor_id: Optional[str],
        start_time_utc: Optional[datetime],
        end_time_utc: Optional[datetime],
    ) -> tuple[str, datetime, datetime]:
        if not vendor_id or start_time_utc is None or end_time_utc is None:
            raise ValidationException(
                "vendor_id, start_time_utc, and end_time_utc are required",
                code="MISSING_FIELDS",
            )

        start = TimezoneService.ensure_utc(start_time_utc)
        end = TimezoneService.ensure_utc(end_time_utc)
        if end <= start:
            raise ValidationException(
                "End time must be after start time",
                code="INVALID_TIME_RANGE",
                details={"start_time_utc": start.isoformat(), "end_time_utc": end.isoformat()},
            )

        if (end - start) % timedelta(minutes=settings.slot_minutes):
            raise ValidationException(
                f"Booking length must be a multiple of {settings.slot_minutes} minutes",
                code="INVALID_DURATION",
                details={"duration_minutes": (end - start).total_seconds() / 60},
            )
        return vendor_id, start, end

    def _get_vendor(self, vendor_id: str) -> Vendor:
        try:
            vendor = self.vendor_repository.get_by_id(vendor_id, load_relationships=False)
        except RepositoryException as exc:
            raise ServiceException(CREATE_FAILED_MESSAGE) from exc
        if vendor is None:
            raise NotFoundException("Vendor not found", code="VENDOR_NOT_FOUND")
        return vendor

    def _validate_lead_time(self, start: datetime, vendor: Vendor) -> None:
        check = TimezoneService.is_within_booking_lead_time(
            start, TimezoneService.ensure_utc(self.clock()), vendor.timezone
        )
        if not check.valid:
            prometheus_metrics.inc_booking("lead_time_rejected")
            raise LeadTimeViolationException(
                required_hours=settings.booking_lead_time_hours,
                current_local_time=check.current_local_time,
                minimum_local_time=check.minimum_local_time,
            )

    # Conflict handling

    @staticmethod
    def _integrity_target(exc: IntegrityError) -> Optional[str]:
        """Name the unique constraint behind ``exc``, from driver diagnostics or message text."""
        orig = getattr(exc, "orig", None)
        diag = getattr(orig, "diag", None)
        constraint_name = (getattr(diag, "constraint_name", "") or "") if diag is not None else ""
        text = f"{constraint_name} {orig if orig is not None else exc}"

        if "uq_booking_slots_vendor_slot" in text or "booking_slots." in text:
            return _SLOT_CLAIM
        if "uq_idempotency_records_key_scope" in text or "idempotency_records." in text:
            return _LEDGER
        return None

    def _handle_integrity_error(
        self,
        exc: IntegrityError,
        idempotency_key: Optional[str],
        request_payload: Dict[str, Any],
        slot_starts: List[datetime],
    ) -> BookingResponse:
        target = self._integrity_target(exc)

        # A keyed duplicate that lost the race converges on the winner's response
        if idempotency_key and target in (_SLOT_CLAIM, _LEDGER):
            cached = self.idempotency_service.lookup(
                idempotency_key, IDEMPOTENCY_SCOPE_BOOKING, request_payload
            )
            if cached is not None:
                prometheus_metrics.inc_idempotent_replay(IDEMPOTENCY_SCOPE_BOOKING)
                prometheus_metrics.inc_booking("replayed")
                return BookingResponse.model_validate(cached)

        if target == _SLOT_CLAIM:
            prometheus_metrics.inc_booking("slot_conflict")
            self.logger.info(
                f"Slot conflict for vendor {request_payload['vendor_id']} "
                f"starting {slot_starts[0].isoformat()}"
            )
            raise SlotConflictException(
                details={
                    "vendor_id": request_payload["vendor_id"],
                    "requested_slots": [instant.isoformat() for instant in slot_starts],
                }
            ) from exc

        self.logger.error(f"Unexpected integrity error creating booking: {exc}")
        raise ServiceException(CREATE_FAILED_MESSAGE) from exc

    def _get_booking_or_404(self, booking_id: str) -> Booking:
        try:
            booking = self.repository.get_with_vendor(booking_id)
        except RepositoryException as exc:
            raise ServiceException("Failed to fetch booking") from exc
        if booking is None:
            raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")
        return booking
