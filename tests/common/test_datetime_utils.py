from __future__ import annotations

from datetime import date, datetime

import pytest

from school_attendance.common.datetime_utils import is_working_day, month_bounds, parse_iso_date, working_days
from school_attendance.core.exceptions import ValidationError


def test_parse_iso_date_drops_time():
    assert parse_iso_date("2024-06-01T15:30:00Z") == date(2024, 6, 1)
    assert parse_iso_date("2024-06-01") == date(2024, 6, 1)
    assert parse_iso_date("2024-06-01 08:15:00") == date(2024, 6, 1)
    assert parse_iso_date(datetime(2024, 6, 1, 23, 59)) == date(2024, 6, 1)


@pytest.mark.parametrize(
    "raw", ["", None, "01/06/2024", "2024-13-01", "yesterday", "2024-06-01-garbage", "2024-06-011", "2024-6-1"]
)
def test_parse_iso_date_rejects(raw):
    with pytest.raises(ValidationError):
        parse_iso_date(raw)


def test_month_bounds_handles_leap_february():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(2023, 2) == (date(2023, 2, 1), date(2023, 2, 28))


@pytest.mark.parametrize("month", [0, 13])
def test_month_bounds_rejects_bad_month(month):
    with pytest.raises(ValidationError):
        month_bounds(2024, month)


def test_working_days_skip_weekends():
    # 2024-06-01 is a Saturday
    assert not is_working_day(date(2024, 6, 1))
    assert is_working_day(date(2024, 6, 3))
    assert len(working_days(date(2024, 6, 1), date(2024, 6, 30))) == 20
    assert working_days(date(2024, 6, 8), date(2024, 6, 9)) == []


@pytest.mark.parametrize("year", [0, 10000])
def test_month_bounds_rejects_out_of_range_year(year):
    with pytest.raises(ValidationError, match="year must be between"):
        month_bounds(year, 6)


def test_working_days_reach_the_last_representable_day():
    start, end = month_bounds(9999, 12)

    assert working_days(start, end)[-1] == date(9999, 12, 31)
