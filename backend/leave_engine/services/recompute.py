"""Balance recomputation from the approved-request ledger.

Runs daily from the worker and on demand through the jobs API. Usage
counters are rebuilt from scratch for every (employee, year) that has
approved requests, so a re-run over unchanged data changes nothing.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any

from sqlalchemy import exc as sa_exc
from sqlalchemy import select
from sqlmodel import col

from leave_engine.exceptions import AppError, ConflictError
from leave_engine.models.enums import AuditAction, LeaveStatus, LeaveType
from leave_engine.models.request import LeaveRequest
from leave_engine.services.audit import SYSTEM_ACTOR, audit_snapshot, record_audit
from leave_engine.services.dates import today_utc
from leave_engine.services.employee import get_employee_service
from leave_engine.services.mutation import UsageTotals, accumulate_usage, toil_hours_for, wfh_counters_from_dates
from leave_engine.services.summary import ensure_summary, find_summary

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.models.summary import LeaveSummary
    from leave_engine.services.employee import EmployeeInfo

logger = logging.getLogger(__name__)

_recompute_lock = asyncio.Lock()


@dataclass
class SkippedRecord:
    employee_id: uuid.UUID
    reason: str


@dataclass
class RecomputationResult:
    """Result of a recomputation run."""

    updated_count: int = 0
    created_count: int = 0
    skipped: list[SkippedRecord] = field(default_factory=list)


# Per-employee failures that skip the employee. Anything else, such as a lost
# database connection, aborts the run.
SKIPPABLE_ERRORS = (AppError, sa_exc.IntegrityError)


def failure_reason(exc: Exception) -> str:
    return exc.message if isinstance(exc, AppError) else str(exc) or type(exc).__name__


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


async def _approved_requests_by_employee_year(
    session: AsyncSession,
) -> dict[uuid.UUID, dict[int, list[LeaveRequest]]]:
    """Group every APPROVED request by employee and by the year of its start date."""
    result = await session.execute(
        select(LeaveRequest)
        .where(col(LeaveRequest.status) == LeaveStatus.APPROVED.value)
        .order_by(col(LeaveRequest.start_date), col(LeaveRequest.created_at))
    )
    grouped: dict[uuid.UUID, dict[int, list[LeaveRequest]]] = defaultdict(lambda: defaultdict(list))
    for request in result.scalars().all():
        grouped[request.employee_id][request.start_date.year].append(request)
    return grouped


async def _replay(summary: LeaveSummary, requests: Sequence[LeaveRequest]) -> bool:
    """Reset usage on ``summary`` and replay ``requests``. Returns True if anything changed."""
    totals = UsageTotals()
    wfh_days: list[date] = []

    for request in requests:
        leave_type = LeaveType(request.leave_type)
        toil_hours = await toil_hours_for(request) if leave_type == LeaveType.TOIL else 0
        totals = accumulate_usage(
            totals,
            leave_type=leave_type,
            number_of_days=request.number_of_days,
            compensation_method=request.compensation_method,
            toil_hours=toil_hours,
        )
        if leave_type == LeaveType.WFH:
            wfh_days.append(request.start_date)

    wfh = wfh_counters_from_dates(wfh_days)
    target: dict[str, Any] = {
        "annual_leave_used": totals.annual_leave_used,
        "sick_leave_used": totals.sick_leave_used,
        "maternity_leave_used": totals.maternity_leave_used,
        "emergency_leave_used": totals.emergency_leave_used,
        "toil_hours_used": totals.toil_hours_used,
        "wfh_used_this_week": wfh.used_this_week,
        "wfh_used_this_month": wfh.used_this_month,
    }
    # Without WFH activity the last tracked week is left alone.
    if wfh.last_week_start is not None:
        target["wfh_last_week_start"] = wfh.last_week_start

    changed = False
    for name, value in target.items():
        if getattr(summary, name) != value:
            setattr(summary, name, value)
            changed = True

    if changed:
        summary.bump_version()
    return changed


async def _recompute_employee(
    session: AsyncSession,
    employee: EmployeeInfo,
    requests_by_year: dict[int, list[LeaveRequest]],
    current_year: int,
    result: RecomputationResult,
) -> None:
    """Rebuild every summary of one employee. The current year is always replayed."""
    years = set(requests_by_year) | {current_year}

    for year in sorted(years):
        existing = await find_summary(session, employee.id, year, for_update=True)
        version_before = existing.version if existing is not None else None

        summary, created = await ensure_summary(session, employee, year, for_update=True)
        before = audit_snapshot(summary)
        changed = await _replay(summary, requests_by_year.get(year, []))
        await session.flush()

        if created:
            result.created_count += 1
        elif summary.version != version_before:
            result.updated_count += 1

        if changed:
            record_audit(session, actor_id=SYSTEM_ACTOR, entity=summary, action=AuditAction.RECOMPUTE, before=before)


async def _recompute_all(session: AsyncSession, today: date) -> RecomputationResult:
    result = RecomputationResult()

    grouped = await _approved_requests_by_employee_year(session)
    employees = await get_employee_service().list_employees()
    known_ids = {employee.id for employee in employees}

    for employee_id in grouped.keys() - known_ids:
        logger.warning("Recomputation found approved requests for unknown employee=%s", employee_id)
        result.skipped.append(
            SkippedRecord(employee_id=employee_id, reason="Approved requests reference an unknown employee")
        )

    for employee in employees:
        try:
            async with session.begin_nested():
                await _recompute_employee(session, employee, grouped.get(employee.id, {}), today.year, result)
        except SKIPPABLE_ERRORS as exc:
            logger.exception("Recomputation failed for employee=%s", employee.id)
            result.skipped.append(SkippedRecord(employee_id=employee.id, reason=failure_reason(exc)))

    await session.commit()
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def run_recomputation(
    session: AsyncSession,
    today: date | None = None,
) -> RecomputationResult:
    """Recompute every leave summary from approved requests.

    For each known employee:
    1. Heal the annual entitlement of each affected year
    2. Reset usage counters and replay approved requests in start-date order
    3. Rebuild WFH counters from the replayed set
    4. Ensure a summary exists for the current year

    Each employee runs in its own savepoint; failures are logged and reported
    in ``skipped`` while the run continues. Only one run may be active at a time.
    """
    if _recompute_lock.locked():
        raise ConflictError("Leave balance recomputation is already running")

    async with _recompute_lock:
        today = today or today_utc()
        result = await _recompute_all(session, today)

    logger.info(
        "Recomputation complete: updated=%d created=%d skipped=%d",
        result.updated_count,
        result.created_count,
        len(result.skipped),
    )
    return result
