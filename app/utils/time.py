"""Time utilities (UTC now, naive->aware coercion, calendar month arithmetic)."""
from __future__ import annotations
import calendar
from datetime import datetime, timezone

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)

def end_of_day(value: datetime) -> datetime:
    return value.replace(hour=23, minute=59, second=59, microsecond=999999)

def subtract_months(value: datetime, months: int) -> datetime:
    """Step back ``months`` calendar months, clamping the day (Mar 31 -> Feb 28/29)."""
    month_index = value.month - 1 - months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

__all__ = ["utc_now", "ensure_utc", "start_of_day", "end_of_day", "subtract_months", "EPOCH"]
