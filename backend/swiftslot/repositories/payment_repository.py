"""Repository for payment records."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.orm import Query, Session, joinedload

from ..database.session_utils import supports_row_locks
from ..models.payment import Payment, PaymentStatus
from .base_repository import BaseRepository


class PaymentRepository(BaseRepository[Payment]):
    """Payment lookups keyed by booking (natural key) or provider reference."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, Payment)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(Payment.booking))

    def get_by_booking_id(self, booking_id: str) -> Optional[Payment]:
        return self.find_one_by(booking_id=booking_id)

    def get_by_reference(self, reference: str, *, with_booking: bool = False) -> Optional[Payment]:
        query = self._build_query().filter(Payment.reference == reference)
        if with_booking:
            query = self._apply_eager_loading(query)
        return self._execute_first(query)

    def get_by_reference_for_update(self, reference: str) -> Optional[Payment]:
        """Load a payment by reference, row-locked where the backend supports it."""
        query = self._build_query().filter(Payment.reference == reference)
        if supports_row_locks(self.db):
            query = query.with_for_update()
        query = query.populate_existing()
        return self._execute_first(query)

    def create_pending_payment(
        self,
        *,
        booking_id: str,
        reference: str,
        amount: Decimal,
        currency: str,
        event_log: dict[str, Any],
    ) -> Payment:
        """
        Insert a pending payment (flushed, not committed).

        Raises:
            IntegrityError: if the booking already has a payment or the reference collides
        """
        return self.create(
            booking_id=booking_id,
            reference=reference,
            status=PaymentStatus.PENDING.value,
            amount=amount,
            currency=currency,
            raw_event_json=event_log,
        )
