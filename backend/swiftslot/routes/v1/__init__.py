# backend/swiftslot/routes/v1/__init__.py
"""
API v1 routes.

Mounted under /api/v1 in main.py.
"""

from . import bookings, health, payments, prometheus, vendors

__all__ = ["bookings", "health", "payments", "prometheus", "vendors"]
