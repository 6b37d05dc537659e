from __future__ import annotations

import calendar
import re
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta

from ..core.exceptions import ValidationError

_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_iso_date(value: str, field_name: str = "date") -> date:
    """Parse an ISO-8601 date (or datetime) string into a date.

    Time-of-day is discarded: "2024-06-01T15:30:00Z" -> date(2024, 6, 1).
    Anything else after the date ("2024-06-01-x") is rejected.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    day_part = re.split(r"[T ]", str(value).strip(), maxsplit=1)[0]
    try:
        if not _ISO_DATE.fullmatch(day_part):
            raise ValueError(day_part)
        return datetime.strptime(day_part, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO date (YYYY-MM-DD)")


def today_local() -> date:
    """Current local date.

    Note: Wrapped so tests can patch it.
    """
    return date.today()


def month_bounds(year: int, month: int) -> tuple[date, date]:
    if not MINYEAR <= int(year) <= MAXYEAR:
        raise ValidationError(f"year must be between {MINYEAR} and {MAXYEAR}")
    if not 1 <= int(month) <= 12:
        raise ValidationError("month must be between 1 and 12")
    last_day = calendar.monthrange(int(year), int(month))[1]
    return date(int(year), int(month), 1), date(int(year), int(month), last_day)


def is_working_day(day: date) -> bool:
    # Saturday=5, Sunday=6
    return day.weekday() < 5


def working_days(start: date, end: date) -> list[date]:
    days = (start + timedelta(days=offset) for offset in range((end - start).days + 1))
    return [d for d in days if is_working_day(d)]
