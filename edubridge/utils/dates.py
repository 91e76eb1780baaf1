from datetime import date, datetime, timedelta, timezone
from typing import List, Tuple

from dateutil.relativedelta import relativedelta


def utcnow() -> datetime:
    """Naive UTC now, matching what MongoDB hands back for stored datetimes."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def start_of_day(value: datetime | date) -> datetime:
    if isinstance(value, datetime):
        value = to_naive_utc(value)
        return datetime(value.year, value.month, value.day)
    return datetime(value.year, value.month, value.day)


def start_of_month(value: datetime) -> datetime:
    return datetime(value.year, value.month, 1)


def sub_months(value: datetime, months: int) -> datetime:
    """Start of the calendar month `months` before `value`."""
    return start_of_month(value - relativedelta(months=months))


def month_windows(today: datetime, count: int = 6) -> List[Tuple[str, datetime, datetime]]:
    """(label, start, end) windows for the last `count` months, oldest first.

    The current month ends at `today`; earlier months end at the start of the next one.
    """
    windows = []
    for i in range(count):
        start = sub_months(today, i)
        end = today if i == 0 else sub_months(today, i - 1)
        windows.append((start.strftime("%b %Y"), start, end))
    windows.reverse()
    return windows


def days_ago(today: datetime, days: int) -> datetime:
    return today - timedelta(days=days)
