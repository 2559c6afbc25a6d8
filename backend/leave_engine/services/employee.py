# ruff: noqa: TC003
"""Employee directory owned by the HR system.

The engine only reads from it: names for reports, gender for maternity
reporting and the hire date that drives annual entitlement.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from leave_engine.exceptions import NotFoundError
from leave_engine.models.enums import Gender


class EmployeeInfo(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    gender: Gender | None = None
    hire_date: date | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@runtime_checkable
class EmployeeService(Protocol):
    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Return the employee, or None if the directory does not know them."""
        ...

    async def list_employees(self) -> list[EmployeeInfo]:
        """Every employee in the directory, in no particular order."""
        ...


class InMemoryEmployeeService:
    """Dictionary-backed directory for development and tests."""

    def __init__(self, *employees: EmployeeInfo) -> None:
        self._employees = {employee.id: employee for employee in employees}

    def seed(self, employee: EmployeeInfo) -> None:
        self._employees[employee.id] = employee

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        return self._employees.get(employee_id)

    async def list_employees(self) -> list[EmployeeInfo]:
        return list(self._employees.values())


_employee_service: EmployeeService = InMemoryEmployeeService()


def get_employee_service() -> EmployeeService:
    return _employee_service


def set_employee_service(service: EmployeeService) -> None:
    """Swap the directory implementation (production wiring or tests)."""
    global _employee_service
    _employee_service = service


async def require_employee(employee_id: uuid.UUID) -> EmployeeInfo:
    """Look up an employee, raising 404 if the directory does not know them."""
    employee = await _employee_service.get_employee(employee_id)
    if employee is None:
        raise NotFoundError(f"Employee {employee_id} not found")
    return employee
