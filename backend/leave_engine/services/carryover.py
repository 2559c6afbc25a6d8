"""Year-end carry-over of unused annual leave.

Runs on Jan 1 from the worker and on demand through the jobs API. The
carried amount on the new year's summary is overwritten, never added to,
so re-running for the same pair of years is safe.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leave_engine.config import get_settings
from leave_engine.exceptions import ConflictError, ValidationError
from leave_engine.models.enums import AuditAction
from leave_engine.models.summary import LeaveSummary
from leave_engine.services.audit import SYSTEM_ACTOR, audit_snapshot, record_audit
from leave_engine.services.dates import today_utc
from leave_engine.services.employee import require_employee
from leave_engine.services.recompute import SKIPPABLE_ERRORS, SkippedRecord, failure_reason
from leave_engine.services.summary import ensure_summary

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_carry_over_lock = asyncio.Lock()


@dataclass
class CarryOverRecord:
    employee_id: uuid.UUID
    previous_year: int
    new_year: int
    unused_days: float
    carried_over_days: float


@dataclass
class CarryOverResult:
    """Result of a carry-over run."""

    previous_year: int
    current_year: int
    items: list[CarryOverRecord] = field(default_factory=list)
    skipped: list[SkippedRecord] = field(default_factory=list)


def _resolve_years(previous_year: int | None, current_year: int | None, today: date) -> tuple[int, int]:
    if previous_year is not None:
        return previous_year, current_year if current_year is not None else previous_year + 1
    if current_year is not None:
        return current_year - 1, current_year
    return today.year - 1, today.year


def unused_annual_days(summary: LeaveSummary) -> float:
    """Unused annual leave on a summary, never negative."""
    return max(0.0, summary.annual_leave_entitlement + summary.annual_leave_carried_over - summary.annual_leave_used)


async def _carry_over_one(
    session: AsyncSession,
    previous: LeaveSummary,
    current_year: int,
    max_days: float,
) -> CarryOverRecord:
    employee = await require_employee(previous.employee_id)

    unused = unused_annual_days(previous)
    carry = min(unused, max_days)

    target, _ = await ensure_summary(session, employee, current_year, for_update=True)
    if target.annual_leave_carried_over != carry:
        before = audit_snapshot(target)
        target.annual_leave_carried_over = carry
        target.bump_version()
        await session.flush()
        record_audit(session, actor_id=SYSTEM_ACTOR, entity=target, action=AuditAction.CARRY_OVER, before=before)

    return CarryOverRecord(
        employee_id=employee.id,
        previous_year=previous.year,
        new_year=current_year,
        unused_days=unused,
        carried_over_days=carry,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def run_carry_over(
    session: AsyncSession,
    previous_year: int | None = None,
    current_year: int | None = None,
    *,
    today: date | None = None,
) -> CarryOverResult:
    """Carry unused annual leave from ``previous_year`` into ``current_year``.

    For every summary of the previous year:
    1. unused = max(0, entitlement + carried_over - used)
    2. carry = min(unused, max_carry_over_days)
    3. Overwrite the new year's carried-over days (creating the summary if needed)

    Defaults to last year into this year. Only one run may be active at a time.
    """
    previous_year, current_year = _resolve_years(previous_year, current_year, today or today_utc())
    if previous_year >= current_year:
        raise ValidationError(
            f"previous_year ({previous_year}) must be earlier than current_year ({current_year})"
        )

    if _carry_over_lock.locked():
        raise ConflictError("Annual leave carry-over is already running")

    async with _carry_over_lock:
        result = CarryOverResult(previous_year=previous_year, current_year=current_year)
        max_days = get_settings().max_carry_over_days

        rows = await session.execute(
            select(LeaveSummary)
            .where(col(LeaveSummary.year) == previous_year)
            .order_by(col(LeaveSummary.employee_id))
        )
        previous_summaries = list(rows.scalars().all())

        for previous in previous_summaries:
            employee_id = previous.employee_id
            try:
                async with session.begin_nested():
                    record = await _carry_over_one(session, previous, current_year, max_days)
                result.items.append(record)
            except SKIPPABLE_ERRORS as exc:
                logger.exception("Carry-over failed for employee=%s", employee_id)
                result.skipped.append(SkippedRecord(employee_id=employee_id, reason=failure_reason(exc)))

        await session.commit()

    logger.info(
        "Carry-over %d -> %d complete: carried=%d skipped=%d",
        previous_year,
        current_year,
        len(result.items),
        len(result.skipped),
    )
    return result
