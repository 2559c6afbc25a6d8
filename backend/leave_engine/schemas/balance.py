# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel

# ---------------------------------------------------------------------------
# Validation balance
# ---------------------------------------------------------------------------


class BalanceInfo(BaseModel):
    """Balance of the bucket a request draws from, as seen by its validator."""

    available: float
    used: float
    entitlement: float
    carried_over: float | None = None


# ---------------------------------------------------------------------------
# Balance snapshot
# ---------------------------------------------------------------------------


class AnnualBalance(BaseModel):
    entitlement: float
    carried_over: float
    used: float
    available: float


class SickBalance(BaseModel):
    """Tiered sick leave bank: full pay, then half pay, then unpaid."""

    full_pay: float
    half_pay: float
    unpaid: float
    total: float
    used: float
    remaining: float


class BucketBalance(BaseModel):
    entitlement: float
    used: float
    remaining: float


class ToilBalance(BaseModel):
    """Hours earned from overtime against hours redeemed as TOIL days."""

    hours_available: float
    hours_used: float
    hours_remaining: float
    days_available: int
    days_used: int


class WfhBalance(BaseModel):
    weekly_limit: int
    monthly_limit: int
    used_this_week: int
    used_this_month: int
    last_week_start: date | None
    remaining_this_month: int


class LeaveBalanceResponse(BaseModel):
    """Full per-type balance snapshot for one employee and year."""

    employee_id: uuid.UUID
    year: int
    annual: AnnualBalance
    sick: SickBalance
    maternity: BucketBalance
    emergency: BucketBalance
    toil: ToilBalance
    wfh: WfhBalance
    version: int
    updated_at: datetime
