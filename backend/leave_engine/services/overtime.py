# ruff: noqa: TC003
from __future__ import annotations

import uuid
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from leave_engine.models.enums import OvertimeStatus

TOIL_HOURS_PER_DAY = 8


class OvertimeRecord(BaseModel):
    """Overtime record from the Overtime Service."""

    id: uuid.UUID
    employee_id: uuid.UUID
    requested_hours: float
    status: OvertimeStatus


@runtime_checkable
class OvertimeService(Protocol):
    """Interface for the Overtime Service."""

    async def get_overtime_records(self, overtime_ids: Iterable[uuid.UUID]) -> list[OvertimeRecord]:
        """Fetch the records that exist among ``overtime_ids``; unknown ids are omitted."""
        ...

    async def list_overtime_records(self, employee_id: uuid.UUID) -> list[OvertimeRecord]:
        """Every record owned by ``employee_id``, whatever its status."""
        ...


class InMemoryOvertimeService:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._records: dict[uuid.UUID, OvertimeRecord] = {}

    def seed(self, record: OvertimeRecord) -> None:
        """Seed an overtime record for testing."""
        self._records[record.id] = record

    async def get_overtime_records(self, overtime_ids: Iterable[uuid.UUID]) -> list[OvertimeRecord]:
        """Fetch the records that exist among ``overtime_ids``; unknown ids are omitted."""
        return [self._records[oid] for oid in overtime_ids if oid in self._records]

    async def list_overtime_records(self, employee_id: uuid.UUID) -> list[OvertimeRecord]:
        return [r for r in self._records.values() if r.employee_id == employee_id]


_overtime_service: OvertimeService = InMemoryOvertimeService()


def get_overtime_service() -> OvertimeService:
    """FastAPI dependency for the Overtime Service."""
    return _overtime_service


def set_overtime_service(service: OvertimeService) -> None:
    """Override the service (for testing or production wiring)."""
    global _overtime_service
    _overtime_service = service


async def approved_overtime_for(
    employee_id: uuid.UUID,
    overtime_ids: Iterable[uuid.UUID | str],
) -> tuple[list[OvertimeRecord], int]:
    """Return the referenced APPROVED records owned by ``employee_id``.

    The second element is the number of distinct ids requested, so callers can
    tell whether any reference was unknown, unapproved or foreign.
    """
    wanted = list(dict.fromkeys(uuid.UUID(str(oid)) for oid in overtime_ids))
    records = await get_overtime_service().get_overtime_records(wanted)
    approved = [r for r in records if r.employee_id == employee_id and r.status == OvertimeStatus.APPROVED]
    return approved, len(wanted)


def toil_days_from_hours(hours: float) -> int:
    """Whole TOIL days earned by ``hours`` of overtime."""
    return int(hours // TOIL_HOURS_PER_DAY)
