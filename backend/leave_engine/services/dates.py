"""Calendar-day arithmetic for leave requests.

Every value that reaches the engine is a ``datetime.date``. Timestamps are
collapsed to their UTC calendar day at the boundary, so two callers sending
the same instant in different offsets always agree on the day count.
"""

from __future__ import annotations

from calendar import monthrange
from datetime import UTC, date, datetime, timedelta

from leave_engine.exceptions import ValidationError
from leave_engine.models.enums import LeaveType

HALF_DAY = 0.5


def today_utc() -> date:
    """Current calendar day on the UTC clock."""
    return datetime.now(UTC).date()


def to_calendar_day(value: date | datetime | str) -> date:
    """Normalise a date, timestamp or ISO string to its UTC calendar day.

    Naive timestamps are taken to be UTC already.
    """
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        value = datetime.fromisoformat(text)

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date()

    return value


def calculate_number_of_days(start: date, end: date, is_half_day: bool) -> float:
    """Inclusive calendar-day count, or 0.5 for a half-day request."""
    if is_half_day:
        return HALF_DAY
    if end < start:
        raise ValidationError("end_date must be on or after start_date")
    return float((end - start).days + 1)


def adjust_end_date_for_leave_type(
    start: date,
    leave_type: LeaveType,
    is_half_day: bool,
    requested_end: date | None = None,
) -> date:
    """Resolve the end date of a request.

    WFH and half-day requests always cover exactly the start day. Every other
    type defaults to the start day unless the caller supplied an end date.
    """
    if leave_type == LeaveType.WFH or is_half_day:
        return start
    return requested_end if requested_end is not None else start


def week_start(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_bounds(day: date) -> tuple[date, date]:
    """Inclusive (Sunday, Saturday) bounds of the week containing ``day``."""
    start = week_start(day)
    return start, start + timedelta(days=6)


def month_bounds(day: date) -> tuple[date, date]:
    """Inclusive (first, last) bounds of the month containing ``day``."""
    _, days_in_month = monthrange(day.year, day.month)
    return day.replace(day=1), day.replace(day=days_in_month)
