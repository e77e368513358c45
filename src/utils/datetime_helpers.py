"""
Standardized Date/Time Handling Utilities

All goal, streak and achievement logic reads the clock through now_utc() so
there is exactly one wall-clock source (tests patch it).

CRITICAL RULES:
- Always store datetimes in DB as UTC (use ensure_utc())
- Streak continuity is evaluated on UTC calendar days (use truncate_to_day())
- Never mix naive and aware datetimes
"""

import logging
from datetime import datetime, date, time, timedelta
from typing import Optional, Union
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

UTC = ZoneInfo("UTC")


def now_utc() -> datetime:
    """
    Get current datetime in UTC (timezone-aware)

    Returns:
        Current datetime in UTC with timezone info
    """
    return datetime.now(UTC)


def today_utc() -> date:
    """Current calendar day in UTC"""
    return now_utc().date()


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC

    Naive datetimes are assumed to already be UTC (that's how the API
    documents them and how PostgreSQL TIMESTAMPTZ returns them).
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def truncate_to_day(value: Union[datetime, date]) -> date:
    """Truncate a datetime (or pass through a date) to its UTC calendar day"""
    if isinstance(value, datetime):
        return ensure_utc(value).date()
    return value


def days_between(earlier: Union[datetime, date], later: Union[datetime, date]) -> int:
    """Whole calendar days from earlier to later (negative if later is before earlier)"""
    return (truncate_to_day(later) - truncate_to_day(earlier)).days


def get_day_start_utc(date_obj: date) -> datetime:
    """Midnight UTC at the start of date_obj"""
    return datetime.combine(date_obj, time.min, tzinfo=UTC)


def get_window_start(days: int, now: Optional[datetime] = None) -> datetime:
    """Start of a look-back window of `days` days ending now"""
    now = now or now_utc()
    return now - timedelta(days=days)
