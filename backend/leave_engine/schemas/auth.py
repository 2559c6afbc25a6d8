# ruff: noqa: TC003
from __future__ import annotations

import enum
import uuid

from pydantic import BaseModel


class Role(enum.StrEnum):
    ADMIN = "admin"
    EMPLOYEE = "employee"


class AuthContext(BaseModel):
    """Caller identity taken from the dev auth headers."""

    user_id: uuid.UUID
    role: Role = Role.EMPLOYEE

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def can_act_for(self, employee_id: uuid.UUID) -> bool:
        """Employees act only for themselves; admins act for anyone."""
        return self.is_admin or employee_id == self.user_id
