"""Date manipulation utilities"""

import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple

from dateutil.relativedelta import relativedelta

SECONDS_PER_DAY = 24 * 60 * 60


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utc_now().date()


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_day_utc(day: date) -> datetime:
    """Midnight UTC of a calendar date (how a bare ISO date is read as an instant)"""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def whole_days_between(start: datetime, end: datetime) -> int:
    """Whole days from start to end, floored (negative when end is earlier)"""
    seconds = (as_utc(end) - as_utc(start)).total_seconds()
    return int(seconds // SECONDS_PER_DAY)


def add_days(from_date: date, days: int) -> date:
    return from_date + timedelta(days=days)


def add_months(from_date: date, months: int) -> date:
    """Add calendar months, clamping the day to the end of the target month"""
    return from_date + relativedelta(months=months)


def add_years(from_date: date, years: int) -> date:
    """Add calendar years; Feb 29 lands on Feb 28 in non-leap years"""
    return from_date + relativedelta(years=years)


def days_until(day: date, now: datetime) -> int:
    """Days left until midnight UTC of `day`, rounded up (partial days count)"""
    seconds = (start_of_day_utc(day) - as_utc(now)).total_seconds()
    return math.ceil(seconds / SECONDS_PER_DAY)


def month_bounds(month: str) -> Tuple[date, date]:
    """First and last day of a "YYYY-MM" month"""
    first = datetime.strptime(month, "%Y-%m").date()
    return first, first + relativedelta(months=1, days=-1)
