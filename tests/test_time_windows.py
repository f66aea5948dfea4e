"""Tests for reference-timezone day windows."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from errors import InvalidInputError
from tests.helpers import NOW, PACIFIC
from utils.time_windows import (
    day_range,
    local_date,
    recent_windows,
    rolling_cutoff,
    utc_day_range,
)


class TestDayRange:
    def test_explicit_date_is_local_calendar_day(self):
        window = day_range(date(2025, 8, 15), PACIFIC)
        assert window.start == datetime(2025, 8, 15, 7, 0, tzinfo=timezone.utc)
        assert window.end == datetime(2025, 8, 16, 7, 0, tzinfo=timezone.utc)
        assert window.local_date == date(2025, 8, 15)

    def test_normal_day_is_24_hours(self):
        window = day_range(date(2025, 8, 15), PACIFIC)
        assert window.end - window.start == timedelta(hours=24)

    def test_defaults_to_today_in_reference_zone(self):
        # 05:00 UTC on the 16th is still 22:00 on the 15th in Pacific
        window = day_range(tz=PACIFIC, now=datetime(2025, 8, 16, 5, 0, tzinfo=timezone.utc))
        assert window.local_date == date(2025, 8, 15)
        assert window.start == datetime(2025, 8, 15, 7, 0, tzinfo=timezone.utc)

    def test_winter_offset(self):
        window = day_range(date(2025, 1, 10), PACIFIC)
        assert window.start == datetime(2025, 1, 10, 8, 0, tzinfo=timezone.utc)

    def test_dst_start_day_ends_at_next_local_midnight(self):
        window = day_range(date(2025, 3, 9), PACIFIC)
        assert window.end - window.start == timedelta(hours=23)

    def test_alternate_zone(self):
        window = day_range(date(2025, 8, 15), ZoneInfo("UTC"))
        assert window.start == datetime(2025, 8, 15, tzinfo=timezone.utc)

    def test_datetime_input_uses_its_date(self):
        window = day_range(datetime(2025, 8, 15, 23, 30), PACIFIC)
        assert window.local_date == date(2025, 8, 15)


class TestRecentWindows:
    def test_seven_days(self):
        windows = recent_windows(7, PACIFIC, NOW)
        assert len(windows.days) == 7
        assert windows.days == sorted(windows.days)
        assert windows.days[0] == date(2025, 8, 9)
        assert windows.days[-1] == date(2025, 8, 15)
        assert windows.index[windows.days[0]] == 0
        assert windows.index[windows.days[-1]] == 6

    def test_bounds_cover_local_days(self):
        windows = recent_windows(7, PACIFIC, NOW)
        assert windows.start == datetime(2025, 8, 9, 7, 0, tzinfo=timezone.utc)
        assert windows.end == datetime(2025, 8, 16, 7, 0, tzinfo=timezone.utc)

    def test_single_day(self):
        windows = recent_windows(1, PACIFIC, NOW)
        assert windows.days == [date(2025, 8, 15)]
        assert windows.index == {date(2025, 8, 15): 0}

    @pytest.mark.parametrize("days", [0, -1, -30])
    def test_rejects_non_positive(self, days):
        with pytest.raises(InvalidInputError):
            recent_windows(days, PACIFIC, NOW)


class TestLocalDate:
    def test_late_evening_pacific_is_next_day_utc(self):
        assert local_date(datetime(2025, 8, 16, 6, 30, tzinfo=timezone.utc), PACIFIC) == date(2025, 8, 15)

    def test_naive_instant_treated_as_utc(self):
        assert local_date(datetime(2025, 8, 16, 6, 30), PACIFIC) == date(2025, 8, 15)


class TestUtcDayRange:
    def test_explicit_date(self):
        start, end = utc_day_range(date(2025, 8, 15))
        assert start == datetime(2025, 8, 15, tzinfo=timezone.utc)
        assert end == datetime(2025, 8, 16, tzinfo=timezone.utc)

    def test_defaults_to_utc_today(self):
        start, _ = utc_day_range(now=datetime(2025, 8, 16, 5, 0, tzinfo=timezone.utc))
        assert start == datetime(2025, 8, 16, tzinfo=timezone.utc)


class TestRollingCutoff:
    def test_cutoff(self):
        assert rolling_cutoff(7, NOW) == NOW - timedelta(days=7)

    def test_rejects_zero(self):
        with pytest.raises(InvalidInputError):
            rolling_cutoff(0, NOW)
