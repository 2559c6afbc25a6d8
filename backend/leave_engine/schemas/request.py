# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from leave_engine.models.enums import CompensationMethod, LeaveStatus, LeaveType
from leave_engine.schemas.balance import BalanceInfo
from leave_engine.services.dates import to_calendar_day

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateLeaveRequestPayload(BaseModel):
    """Request body for creating a leave request.

    Dates may be sent as ``YYYY-MM-DD`` or as ISO timestamps; timestamps are
    reduced to their UTC calendar day.
    """

    employee_id: uuid.UUID | None = None  # defaults to the caller
    leave_type: LeaveType
    start_date: date
    end_date: date | None = None
    is_half_day: bool = False
    reason: str = Field(min_length=1, max_length=2000)
    compensation_method: CompensationMethod | None = None
    relationship: str | None = Field(default=None, max_length=100)
    overtime_request_ids: list[uuid.UUID] = Field(default_factory=list)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _to_calendar_day(cls, value: Any) -> Any:
        if isinstance(value, (str, datetime)):
            return to_calendar_day(value)
        return value

    @field_validator("reason")
    @classmethod
    def _strip_reason(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "reason must not be blank"
            raise ValueError(msg)
        return value


class RejectPayload(BaseModel):
    """Request body for rejecting a leave request."""

    rejection_reason: str = Field(max_length=2000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveRequestResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type: LeaveType
    absence_code: str
    start_date: date
    end_date: date
    is_half_day: bool
    number_of_days: float
    status: LeaveStatus
    reason: str
    compensation_method: str | None
    relationship: str | None
    overtime_request_ids: list[str]
    auto_calculated: dict[str, Any] | None
    created_by: uuid.UUID | None
    approved_by: uuid.UUID | None
    approval_date: datetime | None
    rejection_reason: str | None
    created_at: datetime


class CreateLeaveRequestResponse(BaseModel):
    """A freshly created request with the balance it was validated against."""

    request: LeaveRequestResponse
    balance: BalanceInfo | None
    projected_balance: float | None
    message: str | None = None


class LeaveRequestListResponse(BaseModel):
    """Paginated list of leave requests."""

    items: list[LeaveRequestResponse]
    total: int


# ---------------------------------------------------------------------------
# TOIL overtime
# ---------------------------------------------------------------------------


class AvailableOvertimeItem(BaseModel):
    id: uuid.UUID
    requested_hours: float


class AvailableOvertimeResponse(BaseModel):
    """Approved overtime an employee can still redeem as TOIL."""

    employee_id: uuid.UUID
    items: list[AvailableOvertimeItem]
    total_hours: float
    toil_days: int
