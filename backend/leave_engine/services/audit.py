"""Audit trail for leave requests and summaries."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from leave_engine.models.audit import AuditLog
from leave_engine.models.enums import AuditEntityType
from leave_engine.models.request import LeaveRequest

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.models.enums import AuditAction
    from leave_engine.models.summary import LeaveSummary

# Actor recorded for changes made by the scheduled jobs.
SYSTEM_ACTOR = uuid.UUID(int=0)


def audit_snapshot(entity: LeaveRequest | LeaveSummary) -> dict[str, Any]:
    """JSON-safe copy of every column of ``entity``."""
    data: dict[str, Any] = {}
    for key, value in entity.model_dump().items():
        if isinstance(value, uuid.UUID):
            data[key] = str(value)
        elif isinstance(value, (datetime, date)):
            data[key] = value.isoformat()
        else:
            data[key] = value
    return data


def record_audit(
    session: AsyncSession,
    *,
    actor_id: uuid.UUID,
    entity: LeaveRequest | LeaveSummary,
    action: AuditAction,
    before: dict[str, Any] | None = None,
) -> AuditLog:
    """Add an audit row for ``entity`` in its current state to the caller's transaction.

    ``before`` is the snapshot taken ahead of the change, or None for a creation.
    """
    entity_type = AuditEntityType.LEAVE_REQUEST if isinstance(entity, LeaveRequest) else AuditEntityType.LEAVE_SUMMARY
    entry = AuditLog(
        actor_id=actor_id,
        entity_type=entity_type.value,
        entity_id=entity.id,
        action=action.value,
        before_json=before,
        after_json=audit_snapshot(entity),
    )
    session.add(entry)
    return entry
