from __future__ import annotations

import enum


class LeaveType(enum.StrEnum):
    """Category of a leave request."""

    ANNUAL = "ANNUAL"
    SICK = "SICK"
    MATERNITY = "MATERNITY"
    EMERGENCY = "EMERGENCY"
    TOIL = "TOIL"
    WFH = "WFH"
    BEREAVEMENT = "BEREAVEMENT"


class LeaveStatus(enum.StrEnum):
    """State machine for leave requests. APPROVED and REJECTED are terminal."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class CompensationMethod(enum.StrEnum):
    """How an emergency absence is covered."""

    ANNUAL_LEAVE = "annual_leave"
    UNPAID = "unpaid"
    MAKEUP_HOURS = "makeup_hours"


class OvertimeStatus(enum.StrEnum):
    """Status of an overtime record owned by the overtime service."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Gender(enum.StrEnum):
    """Employee gender as reported by the employee service."""

    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    LEAVE_REQUEST = "LEAVE_REQUEST"
    LEAVE_SUMMARY = "LEAVE_SUMMARY"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    RECOMPUTE = "RECOMPUTE"
    CARRY_OVER = "CARRY_OVER"


ABSENCE_CODES: dict[LeaveType, str] = {
    LeaveType.ANNUAL: "AL",
    LeaveType.SICK: "SL",
    LeaveType.MATERNITY: "ML",
    LeaveType.EMERGENCY: "EL",
    LeaveType.TOIL: "TL",
    LeaveType.WFH: "WFH",
    LeaveType.BEREAVEMENT: "BL",
}
