"""
Unit tests for TimezoneService: slot grid, local/UTC conversion and the
same-day lead time rule.
"""

from datetime import date, datetime, time, timezone

import pytest

from swiftslot.services.timezone_service import TimezoneService

LAGOS = "Africa/Lagos"


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestConversions:
    def test_local_to_utc_lagos(self):
        """Lagos is UTC+1 all year."""
        assert TimezoneService.local_to_utc(date(2025, 3, 10), time(9, 0), LAGOS) == utc(
            2025, 3, 10, 8, 0
        )

    def test_unknown_timezone_falls_back_to_business_timezone(self):
        assert TimezoneService.get_timezone("Not/AZone").zone == LAGOS
        assert TimezoneService.get_timezone(None).zone == LAGOS

    def test_nonexistent_local_time_raises(self):
        """02:30 does not exist in New York on the spring-forward date."""
        with pytest.raises(ValueError, match="does not exist"):
            TimezoneService.local_to_utc(date(2025, 3, 9), time(2, 30), "America/New_York")

    def test_ambiguous_local_time_uses_first_occurrence(self):
        """01:30 happens twice on the fall-back date; the first one is EDT (UTC-4)."""
        result = TimezoneService.local_to_utc(date(2025, 11, 2), time(1, 30), "America/New_York")
        assert result == utc(2025, 11, 2, 5, 30)

    def test_ensure_utc_treats_naive_as_utc(self):
        assert TimezoneService.ensure_utc(datetime(2025, 3, 10, 8, 0)) == utc(2025, 3, 10, 8, 0)

    def test_utc_to_local_clock(self):
        assert TimezoneService.utc_to_local_clock(utc(2025, 3, 10, 15, 30), LAGOS) == "16:30"

    def test_parse_local_date(self):
        assert TimezoneService.parse_local_date("2025-03-10") == date(2025, 3, 10)

    @pytest.mark.parametrize("value", ["2025-13-01", "10/03/2025", "", "tomorrow"])
    def test_parse_local_date_rejects_malformed(self, value):
        with pytest.raises(ValueError):
            TimezoneService.parse_local_date(value)


class TestSlotGrid:
    def test_business_day_has_sixteen_slots(self):
        grid = TimezoneService.generate_slot_grid(date(2025, 3, 10), LAGOS)

        assert len(grid) == 16
        assert grid[0] == utc(2025, 3, 10, 8, 0)  # 09:00 local
        assert grid[-1] == utc(2025, 3, 10, 15, 30)  # 16:30 local
        assert grid == sorted(grid)

    def test_grid_is_deterministic(self):
        assert TimezoneService.generate_slot_grid(
            date(2025, 3, 10), LAGOS
        ) == TimezoneService.generate_slot_grid(date(2025, 3, 10), LAGOS)

    def test_grid_follows_dst_rules_of_the_date(self):
        before = TimezoneService.generate_slot_grid(date(2025, 3, 7), "America/New_York")
        after = TimezoneService.generate_slot_grid(date(2025, 3, 10), "America/New_York")

        assert before[0] == utc(2025, 3, 7, 14, 0)  # EST
        assert after[0] == utc(2025, 3, 10, 13, 0)  # EDT

    def test_slot_starts_cover_half_open_range(self):
        starts = TimezoneService.slot_starts(utc(2025, 3, 10, 8, 0), utc(2025, 3, 10, 9, 30))
        assert starts == [
            utc(2025, 3, 10, 8, 0),
            utc(2025, 3, 10, 8, 30),
            utc(2025, 3, 10, 9, 0),
        ]


class TestLeadTime:
    NOW = utc(2025, 3, 10, 9, 0)  # 10:00 local

    def test_same_day_inside_lead_time_rejected(self):
        check = TimezoneService.is_within_booking_lead_time(
            utc(2025, 3, 10, 10, 0), self.NOW, LAGOS  # 11:00 local
        )

        assert check.valid is False
        assert check.minimum_local_time == "12:00"
        assert check.current_local_time == "10:00"
        assert "Current time: 10:00, minimum booking time: 12:00" in check.reason

    def test_same_day_exactly_at_lead_time_accepted(self):
        check = TimezoneService.is_within_booking_lead_time(
            utc(2025, 3, 10, 11, 0), self.NOW, LAGOS  # 12:00 local
        )
        assert check.valid is True
        assert check.reason is None

    def test_next_local_day_is_not_subject_to_lead_time(self):
        """00:05 local tomorrow is only ~14h away but on a different date."""
        check = TimezoneService.is_within_booking_lead_time(
            utc(2025, 3, 10, 23, 5), self.NOW, LAGOS  # 00:05 local on 2025-03-11
        )
        assert check.valid is True

    def test_late_evening_now_with_next_day_start(self):
        """23:00 local now, 00:30 local tomorrow: accepted by the calendar-date rule."""
        now = utc(2025, 3, 10, 22, 0)
        check = TimezoneService.is_within_booking_lead_time(utc(2025, 3, 10, 23, 30), now, LAGOS)
        assert check.valid is True
