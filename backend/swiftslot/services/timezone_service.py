"""
Centralized timezone handling for SwiftSlot.

Rules:
- All storage: UTC
- All comparisons between instants: UTC
- Slot grid and same-day lead time: the vendor's local calendar
- API responses: UTC instants plus a local "HH:MM" label
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import List, NamedTuple, Optional

import pytz

from ..core.config import settings


class LeadTimeCheck(NamedTuple):
    """Outcome of the same-day lead time rule."""

    valid: bool
    reason: Optional[str]
    current_local_time: str
    minimum_local_time: str


class TimezoneService:
    """Handles all timezone conversions consistently."""

    @staticmethod
    def default_timezone() -> str:
        return settings.business_timezone

    @staticmethod
    def get_timezone(tz_str: Optional[str]) -> pytz.BaseTzInfo:
        """Get timezone object, with fallback to the business timezone."""
        try:
            return pytz.timezone(tz_str or TimezoneService.default_timezone())
        except pytz.UnknownTimeZoneError:
            return pytz.timezone(TimezoneService.default_timezone())

    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """Return ``dt`` as an aware UTC datetime; naive values are taken as UTC."""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def local_to_utc(local_date: date, local_time: time, timezone_str: Optional[str]) -> datetime:
        """
        Convert local date/time to UTC.

        Uses the timezone rules valid on ``local_date`` (not today).

        Raises:
            ValueError: If the time doesn't exist (DST spring-forward gap)
        """
        tz = TimezoneService.get_timezone(timezone_str)
        naive_dt = datetime.combine(local_date, local_time)

        try:
            local_dt = tz.localize(naive_dt, is_dst=None)
        except pytz.exceptions.AmbiguousTimeError:
            # Fall back (time exists twice) - use first occurrence
            local_dt = tz.localize(naive_dt, is_dst=True)
        except pytz.exceptions.NonExistentTimeError:
            raise ValueError(
                f"The time {local_time.strftime('%H:%M')} does not exist on "
                f"{local_date} in {tz.zone} due to Daylight Saving Time."
            )

        return local_dt.astimezone(timezone.utc)

    @staticmethod
    def utc_to_local(utc_dt: datetime, timezone_str: Optional[str]) -> datetime:
        """Convert UTC datetime to local timezone."""
        tz = TimezoneService.get_timezone(timezone_str)
        return TimezoneService.ensure_utc(utc_dt).astimezone(tz)

    @staticmethod
    def utc_to_local_clock(utc_dt: datetime, timezone_str: Optional[str] = None) -> str:
        """Format an instant as the local wall clock, e.g. "09:30"."""
        return TimezoneService.utc_to_local(utc_dt, timezone_str).strftime("%H:%M")

    @staticmethod
    def parse_local_date(value: str) -> date:
        """
        Parse a ``YYYY-MM-DD`` calendar date.

        Raises:
            ValueError: If the value is not a valid date in that format
        """
        try:
            return datetime.strptime(value, "%Y-%m-%d").date()
        except (TypeError, ValueError):
            raise ValueError(f"Invalid date '{value}'. Expected format YYYY-MM-DD")

    @staticmethod
    def generate_slot_grid(local_date: date, timezone_str: Optional[str] = None) -> List[datetime]:
        """
        Build the ordered slot start instants for one local business day.

        Steps of ``settings.slot_minutes`` from business_day_start_hour
        (inclusive) to business_day_end_hour (exclusive). Local times that do
        not exist on ``local_date`` are skipped.
        """
        step = timedelta(minutes=settings.slot_minutes)
        cursor = datetime.combine(local_date, time(settings.business_day_start_hour))
        if settings.business_day_end_hour >= 24:
            day_end = datetime.combine(local_date + timedelta(days=1), time(0))
        else:
            day_end = datetime.combine(local_date, time(settings.business_day_end_hour))

        grid: List[datetime] = []
        while cursor < day_end:
            try:
                grid.append(
                    TimezoneService.local_to_utc(cursor.date(), cursor.time(), timezone_str)
                )
            except ValueError:
                pass  # nonexistent local time (DST gap)
            cursor += step
        return grid

    @staticmethod
    def slot_starts(start_utc: datetime, end_utc: datetime) -> List[datetime]:
        """Ordered slot start instants covering ``[start_utc, end_utc)``."""
        step = timedelta(minutes=settings.slot_minutes)
        cursor = TimezoneService.ensure_utc(start_utc)
        end = TimezoneService.ensure_utc(end_utc)
        starts: List[datetime] = []
        while cursor < end:
            starts.append(cursor)
            cursor += step
        return starts

    @staticmethod
    def is_within_booking_lead_time(
        start_utc: datetime,
        now_utc: datetime,
        timezone_str: Optional[str] = None,
    ) -> LeadTimeCheck:
        """
        Apply the same-day lead time rule in the local timezone.

        When the booking starts on the same local calendar date as ``now_utc``,
        it must start at least ``settings.booking_lead_time_hours`` after now.
        Bookings on any other local date pass.
        """
        lead = timedelta(hours=settings.booking_lead_time_hours)
        start_local = TimezoneService.utc_to_local(start_utc, timezone_str)
        now_local = TimezoneService.utc_to_local(now_utc, timezone_str)
        minimum_local = TimezoneService.get_timezone(timezone_str).normalize(now_local + lead)

        current_label = now_local.strftime("%H:%M")
        minimum_label = minimum_local.strftime("%H:%M")

        if start_local.date() != now_local.date():
            return LeadTimeCheck(True, None, current_label, minimum_label)

        if start_local < minimum_local:
            return LeadTimeCheck(
                False,
                f"Booking must be at least {settings.booking_lead_time_hours} hours from now. "
                f"Current time: {current_label}, minimum booking time: {minimum_label}",
                current_label,
                minimum_label,
            )
        return LeadTimeCheck(True, None, current_label, minimum_label)

