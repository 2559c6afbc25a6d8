# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

from fastapi import APIRouter, Query

from leave_engine.api.deps import AdminDep
from leave_engine.db import SessionDep
from leave_engine.schemas.report import LeaveSummaryReportResponse
from leave_engine.services import report as report_service
from leave_engine.services.dates import today_utc

reports_router = APIRouter(
    prefix="/reports",
    tags=["reports"],
)


@reports_router.get("/leave-summary", response_model=LeaveSummaryReportResponse)
async def get_leave_summary_report(
    session: SessionDep,
    auth: AdminDep,
    year: int | None = Query(default=None, ge=1900, le=9999),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LeaveSummaryReportResponse:
    """Leave taken, allowed and remaining per type for all employees (admin only)."""
    return await report_service.get_leave_summary_report(
        session,
        year or today_utc().year,
        offset=offset,
        limit=limit,
    )
