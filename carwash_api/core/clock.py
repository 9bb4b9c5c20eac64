"""
Business calendar of the car wash.

Timestamps are stored in UTC; "today", report days and date filters follow the
local calendar of BUSINESS_TIMEZONE.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from carwash_api.core.settings import get_app_settings


# PUBLIC_INTERFACE
def business_timezone() -> ZoneInfo:
    """Configured business timezone (America/Asuncion by default)."""
    return ZoneInfo(get_app_settings().BUSINESS_TIMEZONE)


def _as_utc(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored in UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


# PUBLIC_INTERFACE
def to_business_time(moment: datetime) -> datetime:
    """Convert a stored timestamp to local business time."""
    return _as_utc(moment).astimezone(business_timezone())


# PUBLIC_INTERFACE
def business_date(moment: datetime) -> date:
    """Local calendar day a stored timestamp falls on."""
    return to_business_time(moment).date()


# PUBLIC_INTERFACE
def business_today(now: Optional[datetime] = None) -> date:
    """Today's date in the business timezone."""
    return business_date(now or datetime.now(tz=timezone.utc))


def _local_midnight_utc(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz).astimezone(timezone.utc)


# PUBLIC_INTERFACE
def business_day_bounds(start: date, end: Optional[date] = None) -> Tuple[datetime, datetime]:
    """
    UTC [lower, upper) covering the local days start..end inclusive.

    end defaults to start, giving the bounds of a single day.
    """
    tz = business_timezone()
    last = end or start
    return _local_midnight_utc(start, tz), _local_midnight_utc(last + timedelta(days=1), tz)
