"""Tenure-based annual leave entitlement.

Service under six full months earns nothing, a completed year earns the full
30 days, and anything in between earns two days for every full month after
the sixth.
"""

from __future__ import annotations

from datetime import date

FULL_ANNUAL_ENTITLEMENT_DAYS = 30
PRORATED_CAP_DAYS = 24
PROBATION_MONTHS = 6
DAYS_PER_MONTH_AFTER_PROBATION = 2


def full_months_between(start: date, end: date) -> int:
    """Count complete month intervals from ``start`` to ``end``.

    A month is complete once the day-of-month of ``end`` reaches that of
    ``start`` (May 20 -> June 20 is one month, May 20 -> June 19 is zero).
    Negative when ``end`` precedes ``start``.
    """
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if months > 0 and end.day < start.day:
        months -= 1
    elif months < 0 and end.day > start.day:
        months += 1
    return months


def full_months_of_service(hire_date: date, year: int) -> int:
    """Full months served by December 31 of ``year``, capped at a whole year for earlier hires."""
    if hire_date <= date(year, 1, 1):
        return 12
    return full_months_between(hire_date, date(year, 12, 31))


def calculate_annual_entitlement(hire_date: date, year: int) -> int:
    """Return the annual leave days an employee hired on ``hire_date`` earns in ``year``."""
    months = full_months_of_service(hire_date, year)

    if months < PROBATION_MONTHS:
        return 0
    if months >= 12:
        return FULL_ANNUAL_ENTITLEMENT_DAYS

    return min(DAYS_PER_MONTH_AFTER_PROBATION * (months - PROBATION_MONTHS), PRORATED_CAP_DAYS)
