# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import exc as sa_exc
from sqlalchemy import select
from sqlmodel import col

from leave_engine.config import get_settings
from leave_engine.exceptions import IntegrityError, NotFoundError
from leave_engine.models.summary import LeaveSummary
from leave_engine.schemas.balance import (
    AnnualBalance,
    BucketBalance,
    LeaveBalanceResponse,
    SickBalance,
    ToilBalance,
    WfhBalance,
)
from leave_engine.services.employee import require_employee
from leave_engine.services.entitlement import calculate_annual_entitlement
from leave_engine.services.overtime import toil_days_from_hours

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.services.employee import EmployeeInfo


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def entitlement_for(employee: EmployeeInfo, year: int) -> int:
    """Annual entitlement for ``employee`` in ``year``. Refuses to guess a missing hire date."""
    if employee.hire_date is None:
        raise IntegrityError(f"Employee {employee.id} has no hire date; annual entitlement cannot be computed")
    return calculate_annual_entitlement(employee.hire_date, year)


def new_summary(employee_id: uuid.UUID, year: int, annual_entitlement: float) -> LeaveSummary:
    """Build an unsaved summary seeded with the configured policy defaults."""
    settings = get_settings()
    return LeaveSummary(
        employee_id=employee_id,
        year=year,
        annual_leave_entitlement=annual_entitlement,
        sick_leave_full_pay=settings.sick_leave_full_pay_days,
        sick_leave_half_pay=settings.sick_leave_half_pay_days,
        sick_leave_unpaid=settings.sick_leave_unpaid_days,
        maternity_leave_entitlement=settings.maternity_leave_days,
        emergency_leave_entitlement=settings.emergency_leave_days,
        wfh_weekly_limit=settings.wfh_weekly_limit,
        wfh_monthly_limit=settings.wfh_monthly_limit,
    )


async def find_summary(
    session: AsyncSession,
    employee_id: uuid.UUID,
    year: int,
    *,
    for_update: bool = False,
) -> LeaveSummary | None:
    """Fetch the summary for (employee, year), optionally with a FOR UPDATE lock."""
    query = select(LeaveSummary).where(
        col(LeaveSummary.employee_id) == employee_id,
        col(LeaveSummary.year) == year,
    )
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def _insert_summary(session: AsyncSession, summary: LeaveSummary) -> bool:
    """Insert inside a savepoint. Returns False if another writer created the row first."""
    try:
        async with session.begin_nested():
            session.add(summary)
            await session.flush()
    except sa_exc.IntegrityError:
        return False
    return True


# ---------------------------------------------------------------------------
# Accessor
# ---------------------------------------------------------------------------


async def ensure_summary(
    session: AsyncSession,
    employee: EmployeeInfo,
    year: int,
    *,
    for_update: bool = False,
) -> tuple[LeaveSummary, bool]:
    """Get or create the summary for ``employee`` and ``year``.

    The stored annual entitlement is compared against the tenure calculation
    on every call and corrected when stale. Returns ``(summary, created)``.
    """
    entitlement = entitlement_for(employee, year)

    summary = await find_summary(session, employee.id, year, for_update=for_update)
    created = False

    if summary is None:
        candidate = new_summary(employee.id, year, entitlement)
        if await _insert_summary(session, candidate):
            return candidate, True
        # Lost the race to a concurrent creator; use theirs.
        summary = await find_summary(session, employee.id, year, for_update=for_update)
        if summary is None:
            raise NotFoundError(f"Leave summary for employee {employee.id} ({year}) vanished during creation")

    if summary.annual_leave_entitlement != entitlement:
        summary.annual_leave_entitlement = entitlement
        summary.bump_version()
        await session.flush()

    return summary, created


async def get_or_create_leave_summary(
    session: AsyncSession,
    employee_id: uuid.UUID,
    year: int,
    *,
    for_update: bool = False,
) -> LeaveSummary:
    """Get or create the summary for an employee id. Raises 404 for unknown employees."""
    employee = await require_employee(employee_id)
    summary, _ = await ensure_summary(session, employee, year, for_update=for_update)
    return summary


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


def build_balance_response(summary: LeaveSummary) -> LeaveBalanceResponse:
    """Map a summary row to the per-type balance snapshot."""
    sick_total = summary.sick_leave_full_pay + summary.sick_leave_half_pay + summary.sick_leave_unpaid
    annual_total = summary.annual_leave_entitlement + summary.annual_leave_carried_over
    toil_remaining = summary.toil_hours_available - summary.toil_hours_used

    return LeaveBalanceResponse(
        employee_id=summary.employee_id,
        year=summary.year,
        annual=AnnualBalance(
            entitlement=summary.annual_leave_entitlement,
            carried_over=summary.annual_leave_carried_over,
            used=summary.annual_leave_used,
            available=annual_total - summary.annual_leave_used,
        ),
        sick=SickBalance(
            full_pay=summary.sick_leave_full_pay,
            half_pay=summary.sick_leave_half_pay,
            unpaid=summary.sick_leave_unpaid,
            total=sick_total,
            used=summary.sick_leave_used,
            remaining=sick_total - summary.sick_leave_used,
        ),
        maternity=BucketBalance(
            entitlement=summary.maternity_leave_entitlement,
            used=summary.maternity_leave_used,
            remaining=summary.maternity_leave_entitlement - summary.maternity_leave_used,
        ),
        emergency=BucketBalance(
            entitlement=summary.emergency_leave_entitlement,
            used=summary.emergency_leave_used,
            remaining=summary.emergency_leave_entitlement - summary.emergency_leave_used,
        ),
        toil=ToilBalance(
            hours_available=summary.toil_hours_available,
            hours_used=summary.toil_hours_used,
            hours_remaining=toil_remaining,
            days_available=toil_days_from_hours(toil_remaining),
            days_used=toil_days_from_hours(summary.toil_hours_used),
        ),
        wfh=WfhBalance(
            weekly_limit=summary.wfh_weekly_limit,
            monthly_limit=summary.wfh_monthly_limit,
            used_this_week=summary.wfh_used_this_week,
            used_this_month=summary.wfh_used_this_month,
            last_week_start=summary.wfh_last_week_start,
            remaining_this_month=summary.wfh_monthly_limit - summary.wfh_used_this_month,
        ),
        version=summary.version,
        updated_at=summary.updated_at,
    )


async def get_leave_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    year: int,
) -> LeaveBalanceResponse:
    """Return the balance snapshot, creating the summary on first access."""
    summary = await get_or_create_leave_summary(session, employee_id, year)
    await session.commit()
    return build_balance_response(summary)
