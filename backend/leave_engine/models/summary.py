# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

import sqlalchemy as sa
from sqlmodel import Field

from leave_engine.models.base import TimestampMixin, UUIDBase, VersionedMixin, counter_field


class LeaveSummary(UUIDBase, TimestampMixin, VersionedMixin, table=True):
    """Per-employee, per-year ledger of leave entitlements and usage.

    Day buckets are floats because half days are allowed. TOIL is tracked in
    hours and converted to days on read.
    """

    __tablename__ = "leave_summary"
    __table_args__ = (sa.UniqueConstraint("employee_id", "year", name="uq_leave_summary_employee_year"),)

    employee_id: uuid.UUID = Field(index=True)
    year: int = Field(index=True)

    annual_leave_entitlement: float = counter_field()
    annual_leave_used: float = counter_field()
    annual_leave_carried_over: float = counter_field()

    sick_leave_full_pay: float = counter_field(15)
    sick_leave_half_pay: float = counter_field(30)
    sick_leave_unpaid: float = counter_field(45)
    sick_leave_used: float = counter_field()

    maternity_leave_entitlement: float = counter_field(60)
    maternity_leave_used: float = counter_field()

    emergency_leave_entitlement: float = counter_field(5)
    emergency_leave_used: float = counter_field()

    toil_hours_available: float = counter_field()
    toil_hours_used: float = counter_field()

    wfh_weekly_limit: int = counter_field(1)
    wfh_monthly_limit: int = counter_field(4)
    wfh_used_this_week: int = counter_field()
    wfh_used_this_month: int = counter_field()
    wfh_last_week_start: date | None = None
