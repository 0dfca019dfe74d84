# backend/tests/conftest.py
"""
Pytest configuration for the SwiftSlot backend.

Every test gets a fresh in-memory SQLite database; nothing here can reach a
real PostgreSQL instance.
"""

import os
import sys

# CRITICAL: Set the test environment BEFORE any swiftslot imports!
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ.setdefault("BUSINESS_TIMEZONE", "Africa/Lagos")

# Add the backend directory to Python path so imports work
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, backend_dir)

from datetime import datetime, timezone
from typing import Callable, Generator

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from swiftslot.api.dependencies.database import get_db
from swiftslot.database import Base
import swiftslot.models  # noqa: F401
from swiftslot.models import Vendor

# 2025-03-09 10:00 in Lagos (UTC+1); the scenario date 2025-03-10 is the next local day
FIXED_NOW_UTC = datetime(2025, 3, 9, 9, 0, tzinfo=timezone.utc)


def fixed_clock(instant: datetime = FIXED_NOW_UTC) -> Callable[[], datetime]:
    return lambda: instant


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    test_engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(test_engine)
    yield test_engine
    Base.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def vendor(db: Session) -> Vendor:
    vendor = Vendor(name="Adaeze Hair Studio", timezone="Africa/Lagos")
    db.add(vendor)
    db.commit()
    return vendor


@pytest.fixture
def client(session_factory: sessionmaker) -> Generator[TestClient, None, None]:
    """TestClient whose requests run against the per-test database."""
    from swiftslot.main import app

    def override_get_db() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def booking_service(db: Session):
    from swiftslot.services.booking_service import BookingService

    return BookingService(db, clock=fixed_clock())


@pytest.fixture
def payment_service(db: Session):
    from swiftslot.services.payment_service import PaymentService

    return PaymentService(db)
