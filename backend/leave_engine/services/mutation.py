# ruff: noqa: TC003
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, replace
from datetime import date
from typing import TYPE_CHECKING, assert_never

from leave_engine.exceptions import ValidationError
from leave_engine.models.enums import CompensationMethod, LeaveType
from leave_engine.services.dates import week_start
from leave_engine.services.overtime import approved_overtime_for

if TYPE_CHECKING:
    from collections.abc import Iterable

    from leave_engine.models.request import LeaveRequest
    from leave_engine.models.summary import LeaveSummary


@dataclass(frozen=True)
class UsageTotals:
    """Usage counters a set of approved requests contributes to a summary."""

    annual_leave_used: float = 0
    sick_leave_used: float = 0
    maternity_leave_used: float = 0
    emergency_leave_used: float = 0
    toil_hours_used: float = 0


@dataclass(frozen=True)
class WfhCounters:
    used_this_week: int = 0
    used_this_month: int = 0
    last_week_start: date | None = None


# ---------------------------------------------------------------------------
# Pure accumulation
# ---------------------------------------------------------------------------


def accumulate_usage(
    totals: UsageTotals,
    *,
    leave_type: LeaveType,
    number_of_days: float,
    compensation_method: str | None = None,
    toil_hours: float = 0,
) -> UsageTotals:
    """Return ``totals`` with one approved request added.

    WFH is tracked through ``WfhCounters`` and bereavement consumes nothing,
    so both leave the totals unchanged.
    """
    match leave_type:
        case LeaveType.ANNUAL:
            return replace(totals, annual_leave_used=totals.annual_leave_used + number_of_days)
        case LeaveType.SICK:
            return replace(totals, sick_leave_used=totals.sick_leave_used + number_of_days)
        case LeaveType.MATERNITY:
            return replace(totals, maternity_leave_used=totals.maternity_leave_used + number_of_days)
        case LeaveType.EMERGENCY:
            if compensation_method == CompensationMethod.ANNUAL_LEAVE:
                return replace(totals, annual_leave_used=totals.annual_leave_used + number_of_days)
            return replace(totals, emergency_leave_used=totals.emergency_leave_used + number_of_days)
        case LeaveType.TOIL:
            return replace(totals, toil_hours_used=totals.toil_hours_used + toil_hours)
        case LeaveType.WFH | LeaveType.BEREAVEMENT:
            return totals
        case _:
            assert_never(leave_type)


def wfh_counters_from_dates(days: Iterable[date]) -> WfhCounters:
    """Derive WFH counters from a year's approved WFH days.

    The month counter is the busiest calendar month. The week counter is the
    busiest Sunday-start week; on ties the earliest such week is kept.
    """
    ordered = sorted(days)
    if not ordered:
        return WfhCounters()

    per_month = Counter((d.year, d.month) for d in ordered)
    per_week = Counter(week_start(d) for d in ordered)

    busiest_week = None
    busiest_count = 0
    for start in sorted(per_week):
        if per_week[start] > busiest_count:
            busiest_week, busiest_count = start, per_week[start]

    return WfhCounters(
        used_this_week=busiest_count,
        used_this_month=max(per_month.values()),
        last_week_start=busiest_week,
    )


async def toil_hours_for(request: LeaveRequest) -> float:
    """Hours of approved overtime, owned by the requester, that a TOIL request references."""
    if not request.overtime_request_ids:
        return 0
    approved, _ = await approved_overtime_for(request.employee_id, request.overtime_request_ids)
    return sum(record.requested_hours for record in approved)


# ---------------------------------------------------------------------------
# Summary mutation
# ---------------------------------------------------------------------------


def _apply_wfh_approval(summary: LeaveSummary, day: date) -> None:
    request_week = week_start(day)
    summary.wfh_used_this_month += 1
    if summary.wfh_last_week_start == request_week:
        summary.wfh_used_this_week += 1
    else:
        summary.wfh_used_this_week = 1
        summary.wfh_last_week_start = request_week


async def apply_approval_to_summary(summary: LeaveSummary, request: LeaveRequest) -> None:
    """Apply one approved request to its locked summary row.

    The caller must hold the summary's row lock. Raises ``ValidationError``
    without touching the summary if the annual bucket would be overdrawn.
    """
    leave_type = LeaveType(request.leave_type)
    toil_hours = await toil_hours_for(request) if leave_type == LeaveType.TOIL else 0

    delta = accumulate_usage(
        UsageTotals(),
        leave_type=leave_type,
        number_of_days=request.number_of_days,
        compensation_method=request.compensation_method,
        toil_hours=toil_hours,
    )

    if delta == UsageTotals() and leave_type != LeaveType.WFH:
        return

    if delta.annual_leave_used:
        allowance = summary.annual_leave_entitlement + summary.annual_leave_carried_over
        available = allowance - summary.annual_leave_used
        if summary.annual_leave_used + delta.annual_leave_used > allowance:
            raise ValidationError(
                f"Insufficient annual leave balance. Available: {available:.1f} days, "
                f"Requesting: {delta.annual_leave_used:g} days.",
                context={
                    "balance": {
                        "available": available,
                        "used": summary.annual_leave_used,
                        "entitlement": summary.annual_leave_entitlement,
                        "carried_over": summary.annual_leave_carried_over,
                    },
                    "projected_balance": None,
                },
            )

    summary.annual_leave_used += delta.annual_leave_used
    summary.sick_leave_used += delta.sick_leave_used
    summary.maternity_leave_used += delta.maternity_leave_used
    summary.emergency_leave_used += delta.emergency_leave_used
    summary.toil_hours_used += delta.toil_hours_used

    if leave_type == LeaveType.WFH:
        _apply_wfh_approval(summary, request.start_date)

    summary.bump_version()
