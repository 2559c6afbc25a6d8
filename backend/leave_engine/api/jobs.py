# ruff: noqa: B008, TC001, TC003
"""Admin triggers for the recomputation and carry-over batch jobs."""

from __future__ import annotations

from fastapi import APIRouter, Query

from leave_engine.api.deps import AdminDep
from leave_engine.db import SessionDep
from leave_engine.schemas.jobs import (
    CarryOverEntry,
    CarryOverResponse,
    RecomputationResponse,
    SkippedEmployee,
)
from leave_engine.services.carryover import run_carry_over
from leave_engine.services.recompute import run_recomputation

jobs_router = APIRouter(
    prefix="/jobs",
    tags=["jobs"],
)


@jobs_router.post("/recompute", response_model=RecomputationResponse)
async def trigger_recomputation(
    session: SessionDep,
    auth: AdminDep,
) -> RecomputationResponse:
    """Rebuild every leave summary from approved requests (admin only)."""
    result = await run_recomputation(session)
    return RecomputationResponse(
        updated_count=result.updated_count,
        created_count=result.created_count,
        skipped=[SkippedEmployee(employee_id=s.employee_id, reason=s.reason) for s in result.skipped],
    )


@jobs_router.post("/carry-over", response_model=CarryOverResponse)
async def trigger_carry_over(
    session: SessionDep,
    auth: AdminDep,
    previous_year: int | None = Query(default=None, ge=1900, le=9999),
    current_year: int | None = Query(default=None, ge=1900, le=9999),
) -> CarryOverResponse:
    """Carry unused annual leave into the next year (admin only).

    Defaults to last year into this year. Safe to re-run: the carried amount
    is overwritten.
    """
    result = await run_carry_over(session, previous_year, current_year)
    return CarryOverResponse(
        previous_year=result.previous_year,
        current_year=result.current_year,
        items=[
            CarryOverEntry(
                employee_id=item.employee_id,
                previous_year=item.previous_year,
                new_year=item.new_year,
                unused_days=item.unused_days,
                carried_over_days=item.carried_over_days,
            )
            for item in result.items
        ],
        skipped=[SkippedEmployee(employee_id=s.employee_id, reason=s.reason) for s in result.skipped],
    )
