# File: src/stallpilot/utils/datetime.py
"""UTC calendar-day utilities.

Every business day in the stand is a UTC calendar day. Timestamps are
stored naive (UTC) and truncated to a day with ``day_of``.
"""

from datetime import date, datetime, timedelta, timezone


def now_utc() -> datetime:
    """Get current UTC datetime as NAIVE for database storage."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today_utc() -> date:
    """Get today's UTC calendar day."""
    return now_utc().date()


def day_of(value: datetime | date) -> date:
    """Truncate a timestamp to its UTC calendar day.

    Aware datetimes are converted to UTC first; naive ones are assumed UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def day_key(value: datetime | date) -> str:
    """Format the UTC day of a timestamp as YYYY-MM-DD."""
    return day_of(value).isoformat()


def parse_date_only(value: str) -> date:
    """Parse a YYYY-MM-DD string.

    Raises:
        ValueError: If the value is not a valid date
    """
    parts = value.strip().split("-")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid date: {value!r}")
    year, month, day = (int(p) for p in parts)
    return date(year, month, day)


def start_of_day(day: date) -> datetime:
    """Naive UTC midnight opening the given day."""
    return datetime(day.year, day.month, day.day)


def day_range_utc(day: date) -> tuple[datetime, datetime]:
    """Half-open [start, end) timestamp range covering one UTC day."""
    start = start_of_day(day)
    return start, start + timedelta(days=1)


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def add_months(day: date, months: int) -> date:
    """Shift a day by whole months, clamping to the target month's last day."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = (date(year + (month // 12), month % 12 + 1, 1) - timedelta(days=1)).day
    return date(year, month, min(day.day, last_day))


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def start_of_week(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def enumerate_days(start: date, end: date) -> list[date]:
    """All days in the half-open range [start, end)."""
    days = []
    current = start
    while current < end:
        days.append(current)
        current += timedelta(days=1)
    return days
