# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel


class SkippedEmployee(BaseModel):
    """An employee a batch job could not process, with the cause."""

    employee_id: uuid.UUID
    reason: str


class RecomputationResponse(BaseModel):
    """Response from the recomputation trigger endpoint."""

    updated_count: int
    created_count: int
    skipped: list[SkippedEmployee]


class CarryOverEntry(BaseModel):
    employee_id: uuid.UUID
    previous_year: int
    new_year: int
    unused_days: float
    carried_over_days: float


class CarryOverResponse(BaseModel):
    """Response from the carry-over trigger endpoint."""

    previous_year: int
    current_year: int
    items: list[CarryOverEntry]
    skipped: list[SkippedEmployee]
