# ruff: noqa: TC003
"""Per-type leave request validators.

Validators only read state. The summary accessor they call may create a
missing summary or heal a stale entitlement, but no validator ever touches
usage counters. Every validator returns a ``ValidationResult``; raising is
left to the lifecycle controller.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, assert_never

from sqlalchemy import select
from sqlmodel import col

from leave_engine.models.enums import CompensationMethod, LeaveStatus, LeaveType
from leave_engine.models.request import LeaveRequest
from leave_engine.schemas.balance import BalanceInfo
from leave_engine.services.dates import month_bounds, week_bounds
from leave_engine.services.overtime import TOIL_HOURS_PER_DAY, approved_overtime_for, toil_days_from_hours
from leave_engine.services.summary import ensure_summary

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.services.employee import EmployeeInfo

SPOUSE_BEREAVEMENT_DAYS = 5
OTHER_BEREAVEMENT_DAYS = 3

# Requests in these states occupy a WFH slot or hold the overtime they reference.
ACTIVE_STATUSES = (LeaveStatus.PENDING.value, LeaveStatus.APPROVED.value)


@dataclass
class ValidationResult:
    """Outcome of a per-type validation."""

    valid: bool
    message: str | None = None
    balance: BalanceInfo | None = None
    projected_balance: float | None = None


def _fmt(value: float) -> str:
    return f"{value:g}"


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


async def validate_annual(
    session: AsyncSession,
    employee: EmployeeInfo,
    requested_days: float,
    year: int,
) -> ValidationResult:
    """Check the request against entitlement + carry-over - used."""
    summary, _ = await ensure_summary(session, employee, year)

    available = summary.annual_leave_entitlement + summary.annual_leave_carried_over - summary.annual_leave_used
    balance = BalanceInfo(
        available=available,
        used=summary.annual_leave_used,
        entitlement=summary.annual_leave_entitlement,
        carried_over=summary.annual_leave_carried_over,
    )

    if requested_days > available:
        return ValidationResult(
            valid=False,
            message=(
                f"Insufficient annual leave balance. Available: {available:.1f} days, "
                f"Requesting: {_fmt(requested_days)} days."
            ),
            balance=balance,
        )

    return ValidationResult(valid=True, balance=balance, projected_balance=available - requested_days)


async def _wfh_requests_between(
    session: AsyncSession,
    employee_id: uuid.UUID,
    first: date,
    last: date,
) -> Sequence[LeaveRequest]:
    result = await session.execute(
        select(LeaveRequest)
        .where(
            col(LeaveRequest.employee_id) == employee_id,
            col(LeaveRequest.leave_type) == LeaveType.WFH.value,
            col(LeaveRequest.status).in_(ACTIVE_STATUSES),
            col(LeaveRequest.start_date) >= first,
            col(LeaveRequest.start_date) <= last,
        )
        .order_by(col(LeaveRequest.start_date))
    )
    return result.scalars().all()


async def count_wfh_usage(
    session: AsyncSession,
    employee_id: uuid.UUID,
    day: date,
) -> tuple[int, int]:
    """Return (week count, month count) of pending and approved WFH around ``day``."""
    week = await _wfh_requests_between(session, employee_id, *week_bounds(day))
    month = await _wfh_requests_between(session, employee_id, *month_bounds(day))
    return len(week), len(month)


async def validate_wfh(
    session: AsyncSession,
    employee: EmployeeInfo,
    requested_date: date,
) -> ValidationResult:
    """Enforce the weekly and monthly WFH limits.

    Weeks run Sunday to Saturday. Counts come from the request ledger, not the
    cached counters on the summary.
    """
    summary, _ = await ensure_summary(session, employee, requested_date.year)

    week_requests = await _wfh_requests_between(session, employee.id, *week_bounds(requested_date))
    month_requests = await _wfh_requests_between(session, employee.id, *month_bounds(requested_date))
    week_count = len(week_requests)
    month_count = len(month_requests)

    if week_count >= summary.wfh_weekly_limit:
        existing = ", ".join(r.start_date.isoformat() for r in week_requests)
        return ValidationResult(
            valid=False,
            message=(
                f"Weekly WFH limit reached. You already have {week_count} WFH request(s) this week "
                f"({existing}). Maximum allowed: {summary.wfh_weekly_limit} day(s) per week. "
                "You cannot apply for another WFH in the same week."
            ),
        )

    if month_count >= summary.wfh_monthly_limit:
        return ValidationResult(
            valid=False,
            message=(
                f"Monthly WFH limit reached. You have {month_count} WFH request(s) this month. "
                f"Maximum allowed: {summary.wfh_monthly_limit} day(s) per month."
            ),
        )

    remaining = summary.wfh_monthly_limit - month_count
    return ValidationResult(
        valid=True,
        balance=BalanceInfo(available=remaining, used=month_count, entitlement=summary.wfh_monthly_limit),
        projected_balance=remaining - 1,
    )


async def validate_emergency(
    session: AsyncSession,
    employee: EmployeeInfo,
    requested_days: float,
    compensation_method: CompensationMethod | None,
    year: int,
) -> ValidationResult:
    """Annual-leave compensation draws on the annual bucket; other methods are not gated."""
    if compensation_method == CompensationMethod.ANNUAL_LEAVE:
        result = await validate_annual(session, employee, requested_days, year)
        if not result.valid:
            result.message = f"Emergency leave with annual leave compensation: {result.message}"
        return result

    summary, _ = await ensure_summary(session, employee, year)
    available = summary.emergency_leave_entitlement - summary.emergency_leave_used
    return ValidationResult(
        valid=True,
        balance=BalanceInfo(
            available=available,
            used=summary.emergency_leave_used,
            entitlement=summary.emergency_leave_entitlement,
        ),
        projected_balance=available - requested_days,
    )


async def claimed_overtime_ids(
    session: AsyncSession,
    employee_id: uuid.UUID,
    *,
    statuses: Sequence[str] = ACTIVE_STATUSES,
    exclude_request_id: uuid.UUID | None = None,
) -> set[uuid.UUID]:
    """Overtime ids already referenced by the employee's TOIL requests in ``statuses``."""
    query = select(col(LeaveRequest.overtime_request_ids)).where(
        col(LeaveRequest.employee_id) == employee_id,
        col(LeaveRequest.leave_type) == LeaveType.TOIL.value,
        col(LeaveRequest.status).in_(statuses),
    )
    if exclude_request_id is not None:
        query = query.where(col(LeaveRequest.id) != exclude_request_id)
    result = await session.execute(query)
    return {uuid.UUID(str(oid)) for ids in result.scalars().all() for oid in ids or ()}


async def validate_toil(
    session: AsyncSession,
    employee: EmployeeInfo,
    overtime_request_ids: Sequence[uuid.UUID | str],
) -> ValidationResult:
    """Require approved overtime of the employee's own, worth at least one TOIL day and not
    already claimed by another pending or approved TOIL request.
    """
    if not overtime_request_ids:
        return ValidationResult(
            valid=False,
            message="Please select at least one approved overtime request. Minimum 8 hours required.",
        )

    approved, requested_count = await approved_overtime_for(employee.id, overtime_request_ids)
    if len(approved) != requested_count:
        return ValidationResult(
            valid=False,
            message="One or more selected overtime requests are not approved or do not belong to you.",
        )

    wanted = {uuid.UUID(str(oid)) for oid in overtime_request_ids}
    if wanted & await claimed_overtime_ids(session, employee.id):
        return ValidationResult(
            valid=False,
            message="One or more selected overtime requests are already used by another TOIL request.",
        )

    total_hours = sum(record.requested_hours for record in approved)
    if total_hours < TOIL_HOURS_PER_DAY:
        return ValidationResult(
            valid=False,
            message=f"Minimum 8 hours required for TOIL. Selected: {_fmt(total_hours)} hours.",
        )

    days = toil_days_from_hours(total_hours)
    return ValidationResult(
        valid=True,
        message=f"Approved: {days} day(s) based on {_fmt(total_hours)} hours of overtime.",
    )


def validate_bereavement(relationship: str | None) -> ValidationResult:
    """A relationship is mandatory; a spouse earns more days than other relatives."""
    if not relationship or not relationship.strip():
        return ValidationResult(valid=False, message="Please select the relationship to the deceased.")

    relationship = relationship.strip()
    entitlement = SPOUSE_BEREAVEMENT_DAYS if relationship.lower() == "spouse" else OTHER_BEREAVEMENT_DAYS
    return ValidationResult(
        valid=True,
        message=f"Entitlement: {entitlement} days ({relationship}).",
        balance=BalanceInfo(available=entitlement, used=0, entitlement=entitlement),
    )


async def validate_sick(
    session: AsyncSession,
    employee: EmployeeInfo,
    requested_days: float,
    year: int,
) -> ValidationResult:
    summary, _ = await ensure_summary(session, employee, year)
    total = summary.sick_leave_full_pay + summary.sick_leave_half_pay + summary.sick_leave_unpaid
    available = total - summary.sick_leave_used
    return ValidationResult(
        valid=True,
        balance=BalanceInfo(available=available, used=summary.sick_leave_used, entitlement=total),
        projected_balance=available - requested_days,
    )


async def validate_maternity(
    session: AsyncSession,
    employee: EmployeeInfo,
    requested_days: float,
    year: int,
) -> ValidationResult:
    summary, _ = await ensure_summary(session, employee, year)
    available = summary.maternity_leave_entitlement - summary.maternity_leave_used
    return ValidationResult(
        valid=True,
        balance=BalanceInfo(
            available=available,
            used=summary.maternity_leave_used,
            entitlement=summary.maternity_leave_entitlement,
        ),
        projected_balance=available - requested_days,
    )


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


async def validate_leave_request(
    session: AsyncSession,
    employee: EmployeeInfo,
    *,
    leave_type: LeaveType,
    start_date: date,
    number_of_days: float,
    compensation_method: CompensationMethod | None = None,
    relationship: str | None = None,
    overtime_request_ids: Sequence[uuid.UUID | str] = (),
) -> ValidationResult:
    """Route a request to the validator for its leave type."""
    year = start_date.year

    match leave_type:
        case LeaveType.ANNUAL:
            return await validate_annual(session, employee, number_of_days, year)
        case LeaveType.SICK:
            return await validate_sick(session, employee, number_of_days, year)
        case LeaveType.MATERNITY:
            return await validate_maternity(session, employee, number_of_days, year)
        case LeaveType.EMERGENCY:
            return await validate_emergency(session, employee, number_of_days, compensation_method, year)
        case LeaveType.TOIL:
            return await validate_toil(session, employee, overtime_request_ids)
        case LeaveType.WFH:
            return await validate_wfh(session, employee, start_date)
        case LeaveType.BEREAVEMENT:
            return validate_bereavement(relationship)
        case _:
            assert_never(leave_type)
