# backend/swiftslot/repositories/booking_repository.py
"""
Booking Repository for SwiftSlot

Implements data access for bookings and their slot claims:
- Booking creation (flush only, no commit)
- Slot claim insertion, guarded by the (vendor_id, slot_start_utc) unique constraint
- Claimed-slot lookups for availability
- Claim release on cancellation

Conflict detection is never done here by reading first; inserting the claim
rows is the check, and the IntegrityError it raises is left for the service
to classify.
"""

from datetime import datetime
import logging
from typing import Iterable, List, Optional, Sequence, Set

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.constants import ANONYMOUS_BUYER_ID
from ..core.exceptions import RepositoryException
from ..database.session_utils import supports_row_locks
from ..models.booking import Booking, BookingSlot, BookingStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking and slot-claim data access."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(Booking.vendor))

    def create_pending_booking(
        self,
        *,
        vendor_id: str,
        start_time_utc: datetime,
        end_time_utc: datetime,
        buyer_id: str = ANONYMOUS_BUYER_ID,
    ) -> Booking:
        """Insert a booking row in ``pending`` state (flushed, not committed)."""
        return self.create(
            vendor_id=vendor_id,
            buyer_id=buyer_id,
            start_time_utc=start_time_utc,
            end_time_utc=end_time_utc,
            status=BookingStatus.PENDING.value,
        )

    def claim_slots(self, booking: Booking, slot_starts: Sequence[datetime]) -> List[BookingSlot]:
        """
        Insert one claim row per slot start for ``booking``.

        Raises:
            IntegrityError: if any slot is already claimed for the vendor
        """
        claims = [
            BookingSlot(booking_id=booking.id, vendor_id=booking.vendor_id, slot_start_utc=start)
            for start in slot_starts
        ]
        self.db.add_all(claims)
        self.db.flush()
        return claims

    def get_claimed_slot_starts(self, vendor_id: str, candidates: Iterable[datetime]) -> Set[datetime]:
        """Return the subset of ``candidates`` already claimed for ``vendor_id``."""
        candidate_list = list(candidates)
        if not candidate_list:
            return set()
        try:
            rows = (
                self.db.query(BookingSlot.slot_start_utc)
                .filter(
                    BookingSlot.vendor_id == vendor_id,
                    BookingSlot.slot_start_utc.in_(candidate_list),
                )
                .all()
            )
        except SQLAlchemyError as exc:
            self.logger.error("Failed to load claimed slots for vendor %s: %s", vendor_id, exc)
            raise RepositoryException("Failed to load claimed slots") from exc
        return {row[0] for row in rows}

    def get_with_vendor(self, booking_id: str) -> Optional[Booking]:
        return self.get_by_id(booking_id, load_relationships=True)

    def get_for_update(self, booking_id: str) -> Optional[Booking]:
        """Load a booking, taking a row lock where the backend supports it."""
        query = self._build_query().filter(Booking.id == booking_id)
        if supports_row_locks(self.db):
            query = query.with_for_update()
        # Status read under the lock must not come from a stale identity map entry
        query = query.populate_existing()
        return self._execute_first(query)

    def release_slots(self, booking_id: str) -> int:
        """Delete every claim held by ``booking_id``; returns the number released."""
        self.db.flush()
        result = self.db.execute(
            delete(BookingSlot)
            .where(BookingSlot.booking_id == booking_id)
            .execution_options(synchronize_session="fetch")
        )
        return int(result.rowcount or 0)
