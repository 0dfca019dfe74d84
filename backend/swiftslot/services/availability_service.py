"""
Availability Service for SwiftSlot

Lists the free slots of one vendor for one local calendar date: the fixed
business-day grid minus the slots already claimed. This is a read-only view
for the UI; the booking path re-validates every slot through the
unique constraint on claims.
"""

from datetime import date
from typing import List, Union

from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException, ServiceException, ValidationException
from ..repositories.factory import RepositoryFactory
from ..schemas.availability import AvailabilityResponse, AvailableSlot
from .base import BaseService
from .timezone_service import TimezoneService
from .vendor_service import VendorService


class AvailabilityService(BaseService):
    """Computes free slots from the slot grid and the claim table."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.vendor_service = VendorService(db)

    @BaseService.measure_operation("list_available_slots")
    def list_available_slots(
        self, vendor_id: str, local_date: Union[str, date]
    ) -> AvailabilityResponse:
        """
        List unclaimed slots for ``vendor_id`` on ``local_date`` (vendor local time).

        Raises:
            ValidationException: if the date is missing or malformed
            NotFoundException: if the vendor does not exist
        """
        target_date = self._coerce_date(local_date)
        vendor = self.vendor_service.get_vendor_or_404(vendor_id)

        grid = TimezoneService.generate_slot_grid(target_date, vendor.timezone)
        try:
            claimed = self.booking_repository.get_claimed_slot_starts(vendor.id, grid)
        except RepositoryException as exc:
            self.logger.error(f"Error loading availability for vendor {vendor_id}: {exc}")
            raise ServiceException("Failed to fetch availability") from exc

        slots: List[AvailableSlot] = [
            AvailableSlot(
                start_utc=instant,
                start_local=TimezoneService.utc_to_local_clock(instant, vendor.timezone),
            )
            for instant in grid
            if instant not in claimed
        ]

        self.log_operation(
            "list_available_slots",
            vendor_id=vendor.id,
            local_date=target_date.isoformat(),
            free=len(slots),
            claimed=len(claimed),
        )
        return AvailabilityResponse(
            vendor_id=vendor.id,
            date=target_date.isoformat(),
            timezone=vendor.timezone,
            slots=slots,
        )

    @staticmethod
    def _coerce_date(value: Union[str, date, None]) -> date:
        if isinstance(value, date):
            return value
        if not value:
            raise ValidationException(
                "Date parameter is required (YYYY-MM-DD format)", code="INVALID_DATE"
            )
        try:
            return TimezoneService.parse_local_date(value)
        except ValueError as exc:
            raise ValidationException(str(exc), code="INVALID_DATE") from exc
