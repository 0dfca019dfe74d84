# backend/swiftslot/services/payment_service.py
"""
Payment Service for SwiftSlot

Drives bookings through the mock payment provider:
- Lazily creating one Payment per pending booking
- Applying provider success notifications exactly once
- Reporting payment status

Only ``charge.success`` notifications mutate state. Delivery may repeat, so
the webhook path is deduplicated both by the idempotency ledger and by the
payment's own status.
"""

from __future__ import annotations

from decimal import Decimal
import secrets
from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import IDEMPOTENCY_SCOPE_WEBHOOK
from ..core.exceptions import (
    BusinessRuleException,
    NotFoundException,
    RepositoryException,
    ServiceException,
)
from ..models.booking import Booking, BookingStatus
from ..models.payment import Payment, PaymentStatus
from ..models.types import now_utc
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..schemas.payment import (
    PaymentBookingSummary,
    PaymentInitResponse,
    PaymentStatusResponse,
    WebhookAckResponse,
)
from .base import BaseService
from .idempotency_service import IdempotencyService
from .payment_events import ChargeSucceeded, IgnoredEvent, parse_payment_event

if TYPE_CHECKING:
    from ..repositories.booking_repository import BookingRepository
    from ..repositories.payment_repository import PaymentRepository


def generate_payment_reference() -> str:
    """Opaque, unguessable provider reference, e.g. ``pay_3f9c...``."""
    return f"{settings.payment_reference_prefix}{secrets.token_hex(16)}"


def webhook_idempotency_key(reference: str) -> str:
    return f"webhook_{reference}"


class PaymentService(BaseService):
    """Service layer for payment initialization and provider notifications."""

    payment_repository: "PaymentRepository"
    booking_repository: "BookingRepository"

    def __init__(self, db: Session, idempotency_service: Optional[IdempotencyService] = None):
        super().__init__(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.idempotency_service = idempotency_service or IdempotencyService(db)

    @BaseService.measure_operation("initialize_payment")
    def initialize_payment(self, booking_id: str) -> PaymentInitResponse:
        """
        Create (or return the existing) payment for a pending booking.

        Raises:
            NotFoundException: booking does not exist
            BusinessRuleException: booking is not pending
        """
        try:
            booking = self.booking_repository.get_by_id(booking_id, load_relationships=False)
        except RepositoryException as exc:
            raise ServiceException("Failed to initialize payment") from exc
        if booking is None:
            raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")
        if booking.status != BookingStatus.PENDING.value:
            raise BusinessRuleException(
                "Booking is not in pending state",
                code="INVALID_BOOKING_STATE",
                details={"status": booking.status},
            )

        existing = self.payment_repository.get_by_booking_id(booking.id)
        if existing is not None:
            return self._to_init_response(existing)

        amount = Decimal(str(settings.payment_amount))
        try:
            with self.payment_repository.transaction():
                payment = self.payment_repository.create_pending_payment(
                    booking_id=booking.id,
                    reference=generate_payment_reference(),
                    amount=amount,
                    currency=settings.payment_currency,
                    event_log={
                        "initialized_at": now_utc().isoformat(),
                        "amount": float(amount),
                        "currency": settings.payment_currency,
                        "events": [],
                    },
                )
        except IntegrityError as exc:
            # Another request created the payment first; return the winner
            winner = self.payment_repository.get_by_booking_id(booking.id)
            if winner is None:
                self.logger.error(f"Integrity error initializing payment for {booking.id}: {exc}")
                raise ServiceException("Failed to initialize payment") from exc
            return self._to_init_response(winner)
        except SQLAlchemyError as exc:
            self.logger.error(f"Storage error initializing payment for {booking.id}: {exc}")
            raise ServiceException("Failed to initialize payment") from exc

        self.log_operation("initialize_payment", booking_id=booking.id, reference=payment.reference)
        return self._to_init_response(payment)

    @BaseService.measure_operation("handle_notification")
    def handle_notification(
        self, event_type: str, data: Optional[Dict[str, Any]] = None
    ) -> WebhookAckResponse:
        """
        Apply a provider notification.

        Raises:
            ValidationException: malformed payload
            IdempotencyKeyReuseException: ledger entry exists for a different payload
            NotFoundException: no payment with that reference
        """
        event = parse_payment_event(event_type, data)
        if isinstance(event, IgnoredEvent):
            prometheus_metrics.inc_payment_event(event.event_type, "ignored")
            self.logger.info(f"Ignoring payment event '{event.event_type}'")
            return WebhookAckResponse(
                status="ignored", message=f"Event '{event.event_type}' ignored"
            )
        return self._apply_charge_success(event)

    @BaseService.measure_operation("get_payment_status")
    def get_payment_status(self, reference: str) -> PaymentStatusResponse:
        try:
            payment = self.payment_repository.get_by_reference(reference, with_booking=True)
        except RepositoryException as exc:
            raise ServiceException("Failed to fetch payment status") from exc
        if payment is None:
            raise NotFoundException("Payment not found", code="PAYMENT_NOT_FOUND")

        booking = payment.booking
        return PaymentStatusResponse(
            reference=payment.reference,
            status=payment.status,
            amount=payment.amount,
            currency=payment.currency,
            booking_id=payment.booking_id,
            booking=PaymentBookingSummary.model_validate(booking),
            created_at=payment.created_at,
            event_log=dict(payment.raw_event_json or {}),
        )

    def _apply_charge_success(self, event: ChargeSucceeded) -> WebhookAckResponse:
        key = webhook_idempotency_key(event.reference)
        request_payload = {"event": event.event_type, "reference": event.reference}

        cached = self.idempotency_service.lookup(key, IDEMPOTENCY_SCOPE_WEBHOOK, request_payload)
        if cached is not None:
            prometheus_metrics.inc_idempotent_replay(IDEMPOTENCY_SCOPE_WEBHOOK)
            prometheus_metrics.inc_payment_event(event.event_type, "replayed")
            return WebhookAckResponse.model_validate(cached)

        try:
            with self.payment_repository.transaction():
                payment = self.payment_repository.get_by_reference_for_update(event.reference)
                if payment is None:
                    raise NotFoundException("Payment not found", code="PAYMENT_NOT_FOUND")

                # Lock order is payment then booking; cancel only takes the booking lock
                booking = self.booking_repository.get_for_update(payment.booking_id)
                if booking is None:
                    raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")

                was_already_processed = payment.status == PaymentStatus.SUCCESS.value
                if not was_already_processed:
                    self._mark_success(payment, booking, event)

                response = WebhookAckResponse(
                    status="success",
                    reference=payment.reference,
                    payment_status=payment.status,
                    booking_status=booking.status,
                    booking_id=payment.booking_id,
                    processed_at=now_utc(),
                    was_already_processed=was_already_processed,
                )
                if not was_already_processed:
                    self.idempotency_service.stage_record(
                        key,
                        IDEMPOTENCY_SCOPE_WEBHOOK,
                        request_payload,
                        response.model_dump(mode="json"),
                    )
        except IntegrityError as exc:
            # A concurrent delivery recorded the ledger entry first
            cached = self.idempotency_service.lookup(key, IDEMPOTENCY_SCOPE_WEBHOOK, request_payload)
            if cached is None:
                self.logger.error(f"Integrity error processing webhook for {event.reference}: {exc}")
                raise ServiceException("Failed to process webhook") from exc
            prometheus_metrics.inc_idempotent_replay(IDEMPOTENCY_SCOPE_WEBHOOK)
            return WebhookAckResponse.model_validate(cached)
        except SQLAlchemyError as exc:
            self.logger.error(f"Storage error processing webhook for {event.reference}: {exc}")
            raise ServiceException("Failed to process webhook") from exc

        outcome = "duplicate" if response.was_already_processed else "applied"
        prometheus_metrics.inc_payment_event(event.event_type, outcome)
        self.log_operation(
            "handle_notification",
            reference=event.reference,
            booking_id=response.booking_id,
            outcome=outcome,
        )
        return response

    def _mark_success(self, payment: Payment, booking: Booking, event: ChargeSucceeded) -> None:
        if not booking.can_transition_to(BookingStatus.PAID):
            raise BusinessRuleException(
                f"Booking cannot be marked paid from status '{booking.status}'",
                code="INVALID_BOOKING_STATE",
                details={"booking_id": booking.id, "status": booking.status},
            )
        payment.status = PaymentStatus.SUCCESS.value
        payment.record_event(event.event_type, event.payload)
        booking.mark_paid()
        self.payment_repository.flush()

    @staticmethod
    def _to_init_response(payment: Payment) -> PaymentInitResponse:
        return PaymentInitResponse(
            reference=payment.reference,
            status=payment.status,
            amount=payment.amount,
            currency=payment.currency,
        )
