"""Date manipulation utilities"""

import calendar
from datetime import date, datetime


def to_date(value: date | datetime) -> date:
    """Truncate a datetime to its calendar day; dates pass through"""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(later: date | datetime, earlier: date | datetime) -> int:
    """Whole calendar days from earlier to later, ignoring time-of-day (negative if later is before)"""
    return (to_date(later) - to_date(earlier)).days


def last_day_of_month(day: date) -> date:
    """Last calendar day of the month containing day"""
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def clamp_day_of_month(year: int, month: int, day_of_month: int) -> date:
    """Build a date, pulling day_of_month back to the month's last day when it overflows (31 -> Feb 28)"""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, max(1, min(day_of_month, last)))


def add_months(day: date, months: int, day_of_month: int | None = None) -> date:
    """Shift a date by whole months, keeping day_of_month (or day.day) clamped to month length"""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    return clamp_day_of_month(year, month + 1, day_of_month or day.day)


def is_within(day: date, start: date, end: date) -> bool:
    """Inclusive date window check"""
    return start <= day <= end
