from sqlmodel import SQLModel

from leave_engine.models.audit import AuditLog
from leave_engine.models.base import TimestampMixin, UUIDBase, VersionedMixin
from leave_engine.models.enums import (
    ABSENCE_CODES,
    AuditAction,
    AuditEntityType,
    CompensationMethod,
    Gender,
    LeaveStatus,
    LeaveType,
    OvertimeStatus,
)
from leave_engine.models.request import LeaveRequest
from leave_engine.models.summary import LeaveSummary

__all__ = [
    "ABSENCE_CODES",
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "CompensationMethod",
    "Gender",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveSummary",
    "LeaveType",
    "OvertimeStatus",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
    "VersionedMixin",
]
