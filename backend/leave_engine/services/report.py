"""Reporting service: yearly leave summary across all employees."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leave_engine.models.enums import Gender, LeaveStatus, LeaveType
from leave_engine.models.request import LeaveRequest
from leave_engine.models.summary import LeaveSummary
from leave_engine.schemas.report import EmployeeLeaveSummary, LeaveSummaryReportResponse, LeaveTypeUsage
from leave_engine.services.employee import get_employee_service
from leave_engine.services.mutation import UsageTotals, accumulate_usage
from leave_engine.services.overtime import toil_days_from_hours
from leave_engine.services.summary import new_summary

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.services.employee import EmployeeInfo


def _usage(taken: float, allowance: float) -> LeaveTypeUsage:
    return LeaveTypeUsage(taken=taken, allowance=allowance, remaining=allowance - taken)


def _build_row(employee: EmployeeInfo, summary: LeaveSummary, totals: UsageTotals) -> EmployeeLeaveSummary:
    """Combine request-derived usage with the summary's allowances.

    Maternity is reported only for female employees. TOIL is shown in whole
    days and WFH against the monthly limit.
    """
    is_female = employee.gender == Gender.FEMALE

    annual = _usage(totals.annual_leave_used, summary.annual_leave_entitlement + summary.annual_leave_carried_over)
    sick = _usage(
        totals.sick_leave_used,
        summary.sick_leave_full_pay + summary.sick_leave_half_pay + summary.sick_leave_unpaid,
    )
    maternity = (
        _usage(totals.maternity_leave_used, summary.maternity_leave_entitlement)
        if is_female
        else _usage(0, 0)
    )
    emergency = _usage(totals.emergency_leave_used, summary.emergency_leave_entitlement)
    toil = _usage(
        toil_days_from_hours(summary.toil_hours_used),
        toil_days_from_hours(summary.toil_hours_available),
    )
    wfh = _usage(summary.wfh_used_this_month, summary.wfh_monthly_limit)

    buckets = (annual, sick, maternity, emergency, toil, wfh)
    return EmployeeLeaveSummary(
        employee_id=employee.id,
        employee_name=employee.full_name,
        annual=annual,
        sick=sick,
        maternity=maternity,
        emergency=emergency,
        toil=toil,
        wfh=wfh,
        total=_usage(sum(b.taken for b in buckets), sum(b.allowance for b in buckets)),
    )


async def get_leave_summary_report(
    session: AsyncSession,
    year: int,
    *,
    offset: int = 0,
    limit: int = 50,
) -> LeaveSummaryReportResponse:
    """Leave taken, allowed and remaining per type for every known employee.

    Days taken come from APPROVED requests starting within ``year``. Employees
    without a summary for the year are shown against the policy defaults with
    no annual entitlement. Nothing is written.
    """
    employees = sorted(
        await get_employee_service().list_employees(),
        key=lambda e: (e.last_name, e.first_name, str(e.id)),
    )
    page = employees[offset : offset + limit]
    employee_ids = [e.id for e in page]

    summaries_result = await session.execute(
        select(LeaveSummary).where(
            col(LeaveSummary.employee_id).in_(employee_ids),
            col(LeaveSummary.year) == year,
        )
    )
    summaries = {s.employee_id: s for s in summaries_result.scalars().all()}

    requests_result = await session.execute(
        select(LeaveRequest).where(
            col(LeaveRequest.employee_id).in_(employee_ids),
            col(LeaveRequest.status) == LeaveStatus.APPROVED.value,
            col(LeaveRequest.start_date) >= date(year, 1, 1),
            col(LeaveRequest.start_date) <= date(year, 12, 31),
        )
    )
    totals: dict[uuid.UUID, UsageTotals] = defaultdict(UsageTotals)
    for request in requests_result.scalars().all():
        totals[request.employee_id] = accumulate_usage(
            totals[request.employee_id],
            leave_type=LeaveType(request.leave_type),
            number_of_days=request.number_of_days,
            compensation_method=request.compensation_method,
        )

    items = [
        _build_row(
            employee,
            summaries.get(employee.id) or new_summary(employee.id, year, 0),
            totals[employee.id],
        )
        for employee in page
    ]
    return LeaveSummaryReportResponse(year=year, items=items, total=len(employees))
