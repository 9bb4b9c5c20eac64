from datetime import date, datetime, timezone

import pytest

from carwash_api.core.clock import business_date, business_day_bounds, business_today, to_business_time


@pytest.fixture
def asuncion(monkeypatch):
    monkeypatch.setenv("BUSINESS_TIMEZONE", "America/Asuncion")


# Asunción is UTC-3 in January.
LATE_EVENING_UTC = datetime(2025, 1, 15, 2, 30, tzinfo=timezone.utc)


def test_late_evening_sale_belongs_to_the_local_day(asuncion):
    assert business_date(LATE_EVENING_UTC) == date(2025, 1, 14)
    assert business_today(LATE_EVENING_UTC) == date(2025, 1, 14)
    assert to_business_time(LATE_EVENING_UTC).strftime("%H:%M") == "23:30"


def test_naive_timestamps_are_read_as_utc(asuncion):
    assert business_date(LATE_EVENING_UTC.replace(tzinfo=None)) == date(2025, 1, 14)


def test_day_bounds_are_local_midnights(asuncion):
    lo, hi = business_day_bounds(date(2025, 1, 14))
    assert lo == datetime(2025, 1, 14, 3, 0, tzinfo=timezone.utc)
    assert hi == datetime(2025, 1, 15, 3, 0, tzinfo=timezone.utc)
    assert lo <= LATE_EVENING_UTC < hi


def test_range_bounds_cover_both_ends(asuncion):
    lo, hi = business_day_bounds(date(2025, 1, 10), date(2025, 1, 14))
    assert lo == datetime(2025, 1, 10, 3, 0, tzinfo=timezone.utc)
    assert hi == datetime(2025, 1, 15, 3, 0, tzinfo=timezone.utc)


def test_timezone_is_configurable(monkeypatch):
    monkeypatch.setenv("BUSINESS_TIMEZONE", "UTC")
    assert business_date(LATE_EVENING_UTC) == date(2025, 1, 15)
    assert business_day_bounds(date(2025, 1, 15))[0] == datetime(2025, 1, 15, tzinfo=timezone.utc)
