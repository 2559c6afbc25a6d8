# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header, status

from leave_engine.exceptions import AppError
from leave_engine.schemas.auth import AuthContext, Role


async def get_auth_context(
    x_user_id: uuid.UUID = Header(),
    x_role: Role = Header(default=Role.EMPLOYEE),
) -> AuthContext:
    """Build the caller identity from the ``X-User-Id`` and ``X-Role`` headers."""
    return AuthContext(user_id=x_user_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_admin(auth: AuthDep) -> AuthContext:
    if not auth.is_admin:
        raise AppError("Admin access required", status_code=status.HTTP_403_FORBIDDEN)
    return auth


AdminDep = Annotated[AuthContext, Depends(require_admin)]


def ensure_self_or_admin(auth: AuthContext, employee_id: uuid.UUID) -> None:
    """Raise 403 unless the caller may act for ``employee_id``."""
    if not auth.can_act_for(employee_id):
        raise AppError("Not authorized to access another employee's leave", status_code=status.HTTP_403_FORBIDDEN)
