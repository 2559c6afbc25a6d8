# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel


class LeaveTypeUsage(BaseModel):
    taken: float
    allowance: float
    remaining: float


class EmployeeLeaveSummary(BaseModel):
    """Leave taken, allowed and remaining per type for one employee."""

    employee_id: uuid.UUID
    employee_name: str
    annual: LeaveTypeUsage
    sick: LeaveTypeUsage
    maternity: LeaveTypeUsage
    emergency: LeaveTypeUsage
    toil: LeaveTypeUsage
    wfh: LeaveTypeUsage
    total: LeaveTypeUsage


class LeaveSummaryReportResponse(BaseModel):
    """Leave summary across all employees for a year."""

    year: int
    items: list[EmployeeLeaveSummary]
    total: int
