"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, timedelta, timezone


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime"""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC (SQLite drops the offset on the way back)"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: datetime | date | str) -> datetime:
    """Parse a remote timestamp (datetime, date or ISO-8601 string) into aware UTC"""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def parse_date(value: datetime | date | str) -> date:
    """Parse a remote date; timestamps are reduced to their calendar day"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip()[:10])


def add_months(from_date: date, months: int) -> date:
    """Add calendar months, clamping to the last day of a shorter target month"""
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(from_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def with_day_rollover(month_date: date, day: int) -> date:
    """
    Force the day-of-month of a date, spilling past the month end.

    A day beyond the month length rolls into the following month instead of
    clamping (31 applied to February 2024 gives 2024-03-02).
    """
    return month_date.replace(day=1) + timedelta(days=day - 1)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start's month to end's month (day ignored)"""
    return (end.year * 12 + end.month) - (start.year * 12 + start.month)


def format_long_date(value: date) -> str:
    """Human-readable date used in reminder messages, e.g. 15 February 2024"""
    return f"{value.day:02d} {calendar.month_name[value.month]} {value.year}"
