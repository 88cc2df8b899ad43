"""
Tests for core.time — Clock protocol and temporal helpers.
"""

import pytest
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from core.time.clock import FixedClock, SystemClock, epoch_millis, now_local, resolve_timezone
from core.time.temporal import day_window, parse_date_input, parse_timestamp, to_local

KOLKATA = ZoneInfo("Asia/Kolkata")


# ── Clock Tests ──────────────────────────────────────────────

class TestSystemClock:
    def test_returns_utc_datetime(self):
        dt = SystemClock().now_utc()
        assert dt.tzinfo == timezone.utc


class TestFixedClock:
    def test_returns_fixed_time(self):
        fixed = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
        clock = FixedClock(fixed)
        assert clock.now_utc() == fixed
        assert clock.now_utc() == fixed

    def test_rejects_naive_datetime(self):
        with pytest.raises(ValueError, match="timezone-aware"):
            FixedClock(datetime(2025, 1, 1))

    def test_advance(self):
        fixed = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
        clock = FixedClock(fixed)
        clock.advance(60)
        assert clock.now_utc() == fixed + timedelta(seconds=60)


class TestShopLocalHelpers:
    def test_now_local_crosses_midnight(self):
        clock = FixedClock(datetime(2025, 3, 31, 20, 0, tzinfo=timezone.utc))
        local = now_local(clock, KOLKATA)
        assert (local.year, local.month, local.day) == (2025, 4, 1)

    def test_resolve_timezone_empty_is_utc(self):
        assert resolve_timezone("") == timezone.utc
        assert resolve_timezone("Asia/Kolkata") == KOLKATA

    def test_utc_names_resolve_to_fixed_utc(self):
        assert resolve_timezone("UTC") is timezone.utc
        assert resolve_timezone("Etc/UTC") is timezone.utc

    def test_epoch_millis(self):
        assert epoch_millis(datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)) == 1000
        assert epoch_millis(datetime(1970, 1, 1, 0, 0, 2)) == 2000


# ── Parsing ──────────────────────────────────────────────────

class TestParseTimestamp:
    def test_shapes(self):
        aware = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert parse_timestamp(aware) is aware
        assert parse_timestamp("2025-01-02T03:04:05Z") == aware
        assert parse_timestamp({"seconds": aware.timestamp()}) == aware
        assert parse_timestamp(aware.timestamp() * 1000) == aware
        assert parse_timestamp(date(2025, 1, 2)) == datetime(2025, 1, 2)

    def test_unreadable_is_none(self):
        for value in (None, "", "not a date", True, {"nanos": 1}, [1, 2]):
            assert parse_timestamp(value) is None

    def test_values_at_the_calendar_edges_are_none(self):
        assert parse_timestamp("0001-01-01T00:00:00+05:00") is None
        assert parse_timestamp("9999-12-31T23:00:00-05:00") is None
        assert parse_timestamp(datetime.min) is None
        assert parse_timestamp(datetime.max.replace(tzinfo=timezone.utc)) is None
        assert parse_date_input("0001-01-01T00:00:00+05:00", KOLKATA) is None

    def test_old_but_convertible_dates_survive(self):
        assert parse_timestamp("0001-01-03") == datetime(1, 1, 3)


class TestDateInput:
    def test_form_date_is_local_midnight(self):
        parsed = parse_date_input("2025-04-10", KOLKATA)
        assert parsed == datetime(2025, 4, 10, tzinfo=KOLKATA)

    def test_unreadable_date_is_none(self):
        assert parse_date_input("31-31-31", KOLKATA) is None

    def test_day_window_is_inclusive(self):
        start, end = day_window("2025-04-01", "2025-04-30", timezone.utc)
        assert start == datetime(2025, 4, 1, tzinfo=timezone.utc)
        assert end == datetime(2025, 5, 1, tzinfo=timezone.utc) - timedelta(microseconds=1)

    def test_day_window_open_sides(self):
        assert day_window(None, "", timezone.utc) == (None, None)

    def test_to_local_keeps_naive_as_local(self):
        naive = datetime(2025, 4, 1, 9, 0)
        assert to_local(naive, KOLKATA) == datetime(2025, 4, 1, 9, 0, tzinfo=KOLKATA)
