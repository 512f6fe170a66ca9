import calendar
from datetime import date, datetime, time, timedelta
from typing import Iterator, Tuple, Union
from zoneinfo import ZoneInfo

from app.core.config import settings

WEEKEND_DAYS = (5, 6)  # Saturday, Sunday


def is_weekend(day: date) -> bool:
    return day.weekday() in WEEKEND_DAYS


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day in [start, end]"""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def business_days_between(start: date, end: date) -> int:
    """Count days in [start, end] that are not Saturday or Sunday. 0 if end < start."""
    return sum(1 for day in iter_days(start, end) if not is_weekend(day))


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last day of the month"""
    days_in_month = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, days_in_month)


def parse_time_of_day(value: Union[str, time]) -> time:
    """Accept a time or an "HH:MM" / "HH:MM:SS" string"""
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(value.strip())
    except (ValueError, AttributeError):
        raise ValueError(f"Invalid time of day: {value!r}")


def to_minutes(value: time) -> int:
    """Minutes since midnight; seconds are ignored"""
    return value.hour * 60 + value.minute


def hours_between(start: time, end: time) -> float:
    """Hours from start to end on the same calendar day, rounded to 2 places"""
    start_seconds = start.hour * 3600 + start.minute * 60 + start.second
    end_seconds = end.hour * 3600 + end.minute * 60 + end.second
    return round((end_seconds - start_seconds) / 3600, 2)


def local_now() -> datetime:
    """Current wall-clock time in the configured business timezone"""
    return datetime.now(ZoneInfo(settings.TIMEZONE))


def local_today() -> date:
    return local_now().date()
