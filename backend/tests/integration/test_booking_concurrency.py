"""
Concurrent booking attempts against a file-backed SQLite database.

Each worker thread uses its own session and connection; the unique
constraint on booking_slots is the only thing that serializes them.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
import threading

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from swiftslot.core.exceptions import SlotConflictException
from swiftslot.database import Base
from swiftslot.models import Booking, BookingSlot, Vendor
from swiftslot.services.booking_service import BookingService

WORKERS = 8
START = datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)
END = datetime(2025, 3, 10, 8, 30, tzinfo=timezone.utc)
NOW = datetime(2025, 3, 9, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def file_session_factory(tmp_path):
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'concurrency.db'}",
        future=True,
        # IMMEDIATE makes writers queue on the database lock instead of deadlocking
        connect_args={"check_same_thread": False, "timeout": 30, "isolation_level": "IMMEDIATE"},
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def file_vendor_id(file_session_factory):
    with file_session_factory() as session:
        vendor = Vendor(name="Concurrent Vendor", timezone="Africa/Lagos")
        session.add(vendor)
        session.commit()
        return vendor.id


def _race(session_factory, vendor_id, idempotency_key=None):
    barrier = threading.Barrier(WORKERS)

    def attempt(_):
        with session_factory() as session:
            service = BookingService(session, clock=lambda: NOW)
            barrier.wait()
            try:
                return service.create_booking(vendor_id, START, END, idempotency_key)
            except SlotConflictException as exc:
                return exc

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        return list(pool.map(attempt, range(WORKERS)))


class TestConcurrentBooking:
    def test_exactly_one_booking_wins(self, file_session_factory, file_vendor_id):
        results = _race(file_session_factory, file_vendor_id)

        successes = [r for r in results if not isinstance(r, Exception)]
        conflicts = [r for r in results if isinstance(r, SlotConflictException)]
        assert len(successes) == 1
        assert len(conflicts) == WORKERS - 1

        with file_session_factory() as session:
            assert session.query(Booking).count() == 1
            assert session.query(BookingSlot).count() == 1

    def test_keyed_duplicates_converge_on_one_response(self, file_session_factory, file_vendor_id):
        results = _race(file_session_factory, file_vendor_id, idempotency_key="same-key")

        assert all(not isinstance(r, Exception) for r in results)
        assert len({r.id for r in results}) == 1
        assert len({r.model_dump_json() for r in results}) == 1

        with file_session_factory() as session:
            assert session.query(Booking).count() == 1
