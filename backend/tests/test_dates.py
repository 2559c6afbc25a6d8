"""Tests for calendar-day arithmetic."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from leave_engine.exceptions import ValidationError
from leave_engine.models.enums import LeaveType
from leave_engine.services import dates
from leave_engine.services.dates import (
    adjust_end_date_for_leave_type,
    calculate_number_of_days,
    month_bounds,
    to_calendar_day,
    today_utc,
    week_bounds,
    week_start,
)

# ---------------------------------------------------------------------------
# to_calendar_day
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "value",
    [
        "2025-03-02",
        "2025-03-02T00:00:00Z",
        "2025-03-02T03:00:00+03:00",
        "2025-03-01T22:30:00-01:30",
        datetime(2025, 3, 2, 12, 0),
        datetime(2025, 3, 2, 23, 59, tzinfo=UTC),
        date(2025, 3, 2),
    ],
)
def test_equivalent_inputs_resolve_to_same_day(value: object) -> None:
    assert to_calendar_day(value) == date(2025, 3, 2)  # type: ignore[arg-type]


def test_aware_timestamp_is_converted_to_utc_before_truncating() -> None:
    dubai = timezone(timedelta(hours=4))
    assert to_calendar_day(datetime(2025, 3, 3, 2, 0, tzinfo=dubai)) == date(2025, 3, 2)


def test_today_follows_the_utc_clock(monkeypatch: pytest.MonkeyPatch) -> None:
    new_york = timezone(timedelta(hours=-5))

    class _NewYearsEveInNewYork(datetime):
        @classmethod
        def now(cls, tz: object = None) -> datetime:  # type: ignore[override]
            return datetime(2025, 12, 31, 21, 30, tzinfo=new_york).astimezone(tz)  # type: ignore[arg-type]

    monkeypatch.setattr(dates, "datetime", _NewYearsEveInNewYork)

    assert today_utc() == date(2026, 1, 1)



# ---------------------------------------------------------------------------
# calculate_number_of_days
# ---------------------------------------------------------------------------


def test_single_day_counts_as_one() -> None:
    assert calculate_number_of_days(date(2025, 3, 2), date(2025, 3, 2), False) == 1.0


def test_range_is_inclusive() -> None:
    assert calculate_number_of_days(date(2025, 2, 27), date(2025, 3, 2), False) == 4.0


def test_half_day_is_half_regardless_of_range() -> None:
    assert calculate_number_of_days(date(2025, 3, 2), date(2025, 3, 9), True) == 0.5


def test_end_before_start_is_rejected() -> None:
    with pytest.raises(ValidationError):
        calculate_number_of_days(date(2025, 3, 2), date(2025, 3, 1), False)


def test_timezone_shifted_timestamps_give_identical_counts() -> None:
    a = calculate_number_of_days(
        to_calendar_day("2025-03-02T00:00:00Z"), to_calendar_day("2025-03-04T00:00:00Z"), False
    )
    b = calculate_number_of_days(
        to_calendar_day("2025-03-02T03:00:00+03:00"), to_calendar_day("2025-03-04T03:00:00+03:00"), False
    )
    assert a == b == 3.0


# ---------------------------------------------------------------------------
# adjust_end_date_for_leave_type
# ---------------------------------------------------------------------------


def test_wfh_always_ends_on_start_day() -> None:
    start = date(2025, 3, 2)
    assert adjust_end_date_for_leave_type(start, LeaveType.WFH, False, date(2025, 3, 5)) == start


def test_half_day_always_ends_on_start_day() -> None:
    start = date(2025, 3, 2)
    assert adjust_end_date_for_leave_type(start, LeaveType.ANNUAL, True, date(2025, 3, 5)) == start


def test_other_types_default_to_start_day() -> None:
    start = date(2025, 3, 2)
    assert adjust_end_date_for_leave_type(start, LeaveType.SICK, False) == start


def test_other_types_keep_caller_end_date() -> None:
    assert adjust_end_date_for_leave_type(date(2025, 3, 2), LeaveType.ANNUAL, False, date(2025, 3, 5)) == date(
        2025, 3, 5
    )


# ---------------------------------------------------------------------------
# Windows
# ---------------------------------------------------------------------------


def test_week_starts_on_sunday() -> None:
    # 2025-03-05 is a Wednesday.
    assert week_start(date(2025, 3, 5)) == date(2025, 3, 2)
    assert week_start(date(2025, 3, 2)) == date(2025, 3, 2)
    assert week_start(date(2025, 3, 8)) == date(2025, 3, 2)
    assert week_bounds(date(2025, 3, 5)) == (date(2025, 3, 2), date(2025, 3, 8))


def test_month_bounds() -> None:
    assert month_bounds(date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(date(2025, 12, 31)) == (date(2025, 12, 1), date(2025, 12, 31))
