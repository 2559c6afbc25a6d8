# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from fastapi import APIRouter, Query

from leave_engine.api.deps import AuthDep, ensure_self_or_admin
from leave_engine.db import SessionDep
from leave_engine.schemas.balance import LeaveBalanceResponse
from leave_engine.services import summary as summary_service
from leave_engine.services.dates import today_utc

employee_balance_router = APIRouter(
    prefix="/employees/{employee_id}/leave-balance",
    tags=["balances"],
)


@employee_balance_router.get("", response_model=LeaveBalanceResponse)
async def get_leave_balance(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None, ge=1900, le=9999),
) -> LeaveBalanceResponse:
    """Get the per-type leave balance for an employee (defaults to the current year)."""
    ensure_self_or_admin(auth, employee_id)
    return await summary_service.get_leave_balance(session, employee_id, year or today_utc().year)
