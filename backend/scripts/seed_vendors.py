#!/usr/bin/env python3
"""
Seed script for SwiftSlot demo vendors.

Creates the tables if they are missing and inserts a small set of vendors,
skipping any whose name already exists. Safe to run repeatedly.

Usage:
    python scripts/seed_vendors.py
"""

import logging
from pathlib import Path
import sys

# Add the parent directory to the path so we can import swiftslot modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from swiftslot.core.config import settings  # noqa: E402
from swiftslot.database import Base, SessionLocal, engine  # noqa: E402
from swiftslot.models import Vendor  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

DEMO_VENDORS = [
    "Adaeze Hair Studio",
    "Lekki Barbers",
    "Ikoyi Wellness Spa",
    "Yaba Tech Repairs",
]


def seed_vendors() -> int:
    """Insert missing demo vendors; returns how many were created."""
    Base.metadata.create_all(bind=engine)

    created = 0
    with SessionLocal() as session:
        existing = {name for (name,) in session.query(Vendor.name).all()}
        for name in DEMO_VENDORS:
            if name in existing:
                logger.info(f"Vendor already present: {name}")
                continue
            session.add(Vendor(name=name, timezone=settings.business_timezone))
            created += 1
        session.commit()

        for vendor in session.query(Vendor).order_by(Vendor.name).all():
            logger.info(f"  {vendor.id}  {vendor.name} ({vendor.timezone})")

    logger.info(f"Seeded {created} vendor(s)")
    return created


if __name__ == "__main__":
    seed_vendors()
