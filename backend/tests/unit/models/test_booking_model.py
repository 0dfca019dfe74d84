"""Tests for the Booking state machine and slot-claim constraint."""

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from swiftslot.models import Booking, BookingSlot, BookingStatus


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestBookingStateMachine:
    def _booking(self, status: BookingStatus) -> Booking:
        return Booking(
            vendor_id="01HZZZZZZZZZZZZZZZZZZZZZZZ",
            start_time_utc=utc(2025, 3, 10, 8, 0),
            end_time_utc=utc(2025, 3, 10, 8, 30),
            status=status.value,
        )

    def test_defaults(self):
        booking = Booking(
            vendor_id="01HZZZZZZZZZZZZZZZZZZZZZZZ",
            start_time_utc=utc(2025, 3, 10, 8, 0),
            end_time_utc=utc(2025, 3, 10, 8, 30),
        )
        assert booking.status == "pending"
        assert booking.buyer_id == "anonymous"

    def test_pending_can_be_paid_or_cancelled(self):
        booking = self._booking(BookingStatus.PENDING)
        assert booking.can_transition_to(BookingStatus.PAID)
        assert booking.can_transition_to(BookingStatus.CANCELLED)

    @pytest.mark.parametrize("terminal", [BookingStatus.PAID, BookingStatus.CANCELLED])
    def test_terminal_states_have_no_exits(self, terminal):
        booking = self._booking(terminal)
        for target in BookingStatus:
            assert not booking.can_transition_to(target)

    def test_mark_paid_sets_timestamp(self):
        booking = self._booking(BookingStatus.PENDING)
        booking.mark_paid()
        assert booking.status == "paid"
        assert booking.paid_at is not None


class TestSlotClaimConstraint:
    def test_vendor_slot_pair_is_unique(self, db, vendor):
        booking = Booking(
            vendor_id=vendor.id,
            start_time_utc=utc(2025, 3, 10, 8, 0),
            end_time_utc=utc(2025, 3, 10, 8, 30),
        )
        db.add(booking)
        db.flush()
        db.add(
            BookingSlot(
                booking_id=booking.id, vendor_id=vendor.id, slot_start_utc=utc(2025, 3, 10, 8, 0)
            )
        )
        db.commit()

        db.add(
            BookingSlot(
                booking_id=booking.id, vendor_id=vendor.id, slot_start_utc=utc(2025, 3, 10, 8, 0)
            )
        )
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_instants_round_trip_as_aware_utc(self, db, vendor):
        booking = Booking(
            vendor_id=vendor.id,
            start_time_utc=utc(2025, 3, 10, 8, 0),
            end_time_utc=utc(2025, 3, 10, 8, 30),
        )
        db.add(booking)
        db.commit()
        db.expire_all()

        loaded = db.get(Booking, booking.id)
        assert loaded.start_time_utc.tzinfo is not None
        assert loaded.start_time_utc == utc(2025, 3, 10, 8, 0)
