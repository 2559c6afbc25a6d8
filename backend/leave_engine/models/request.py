# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from leave_engine.models.base import TimestampMixin, UUIDBase
from leave_engine.models.enums import LeaveStatus


class LeaveRequest(UUIDBase, TimestampMixin, table=True):
    """A single leave instance with its approval state."""

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.Index("ix_leave_request_employee_type_start", "employee_id", "leave_type", "start_date"),
        sa.Index("ix_leave_request_status", "status"),
    )

    employee_id: uuid.UUID = Field(index=True)
    leave_type: str = Field(max_length=50)
    start_date: date
    end_date: date
    is_half_day: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})
    number_of_days: float
    status: str = Field(default=LeaveStatus.PENDING, max_length=50, sa_column_kwargs={"server_default": "PENDING"})
    reason: str
    compensation_method: str | None = Field(default=None, max_length=50)
    relationship: str | None = Field(default=None, max_length=100)
    overtime_request_ids: list[str] = Field(default_factory=list, sa_type=sa.JSON)
    auto_calculated: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    created_by: uuid.UUID | None = None
    approved_by: uuid.UUID | None = None
    approval_date: datetime | None = Field(
        default=None,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
    )
    rejection_reason: str | None = None
