# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leave_engine.exceptions import AppError, ConflictError, NotFoundError, ValidationError
from leave_engine.models.enums import ABSENCE_CODES, AuditAction, LeaveStatus, LeaveType, OvertimeStatus
from leave_engine.models.request import LeaveRequest
from leave_engine.schemas.request import (
    AvailableOvertimeItem,
    AvailableOvertimeResponse,
    CreateLeaveRequestResponse,
    LeaveRequestListResponse,
    LeaveRequestResponse,
)
from leave_engine.services.audit import audit_snapshot, record_audit
from leave_engine.services.dates import adjust_end_date_for_leave_type, calculate_number_of_days
from leave_engine.services.employee import require_employee
from leave_engine.services.mutation import apply_approval_to_summary
from leave_engine.services.overtime import get_overtime_service, toil_days_from_hours
from leave_engine.services.summary import ensure_summary
from leave_engine.services.validators import claimed_overtime_ids, count_wfh_usage, validate_leave_request

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.schemas.auth import AuthContext
    from leave_engine.schemas.request import CreateLeaveRequestPayload
    from leave_engine.services.validators import ValidationResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_request_response(request: LeaveRequest) -> LeaveRequestResponse:
    """Map a request model to its response schema."""
    leave_type = LeaveType(request.leave_type)
    return LeaveRequestResponse(
        id=request.id,
        employee_id=request.employee_id,
        leave_type=leave_type,
        absence_code=ABSENCE_CODES[leave_type],
        start_date=request.start_date,
        end_date=request.end_date,
        is_half_day=request.is_half_day,
        number_of_days=request.number_of_days,
        status=LeaveStatus(request.status),
        reason=request.reason,
        compensation_method=request.compensation_method,
        relationship=request.relationship,
        overtime_request_ids=list(request.overtime_request_ids or []),
        auto_calculated=request.auto_calculated,
        created_by=request.created_by,
        approved_by=request.approved_by,
        approval_date=request.approval_date,
        rejection_reason=request.rejection_reason,
        created_at=request.created_at,
    )


def _validation_context(result: ValidationResult) -> dict[str, object]:
    return {
        "balance": result.balance.model_dump() if result.balance is not None else None,
        "projected_balance": result.projected_balance,
    }


async def _get_request_or_404(
    session: AsyncSession,
    request_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> LeaveRequest:
    """Fetch a request by ID, optionally locking its row. Raises 404 if not found."""
    query = select(LeaveRequest).where(col(LeaveRequest.id) == request_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError(f"Leave request {request_id} not found")
    return request


def _ensure_pending(request: LeaveRequest, verb: str) -> None:
    if request.status != LeaveStatus.PENDING.value:
        raise ConflictError(f"Cannot {verb} a leave request with status '{request.status}'")


async def _ensure_overtime_unredeemed(session: AsyncSession, request: LeaveRequest) -> None:
    """A TOIL request may not redeem overtime another approved TOIL request already used."""
    redeemed = await claimed_overtime_ids(
        session,
        request.employee_id,
        statuses=(LeaveStatus.APPROVED.value,),
        exclude_request_id=request.id,
    )
    if redeemed & {uuid.UUID(str(oid)) for oid in request.overtime_request_ids or ()}:
        raise ConflictError("Selected overtime has already been redeemed by an approved TOIL request")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateLeaveRequestPayload,
) -> CreateLeaveRequestResponse:
    """Validate and persist a new PENDING leave request.

    Flow:
    1. Resolve the employee (callers other than admins may only file for themselves)
    2. Infer the end date and count the days
    3. Run the per-type validator
    4. Record WFH usage at creation time
    5. Create the request, write the audit log, commit
    """
    employee_id = payload.employee_id or auth.user_id
    if not auth.can_act_for(employee_id):
        raise AppError("Not authorized to create leave requests for another employee", status_code=403)

    # 1. Resolve employee.
    employee = await require_employee(employee_id)

    # 2. Dates and duration.
    end_date = adjust_end_date_for_leave_type(
        payload.start_date, payload.leave_type, payload.is_half_day, payload.end_date
    )
    number_of_days = calculate_number_of_days(payload.start_date, end_date, payload.is_half_day)

    # 3. Validate.
    result = await validate_leave_request(
        session,
        employee,
        leave_type=payload.leave_type,
        start_date=payload.start_date,
        number_of_days=number_of_days,
        compensation_method=payload.compensation_method,
        relationship=payload.relationship,
        overtime_request_ids=payload.overtime_request_ids,
    )
    if not result.valid:
        raise ValidationError(result.message or "Leave request is not valid", context=_validation_context(result))

    # 4. WFH counts including this request.
    auto_calculated = None
    if payload.leave_type == LeaveType.WFH:
        week_count, month_count = await count_wfh_usage(session, employee.id, payload.start_date)
        auto_calculated = {"wfh_week_count": week_count + 1, "wfh_month_count": month_count + 1}

    # 5. Persist.
    leave_request = LeaveRequest(
        employee_id=employee.id,
        leave_type=payload.leave_type.value,
        start_date=payload.start_date,
        end_date=end_date,
        is_half_day=payload.is_half_day,
        number_of_days=number_of_days,
        status=LeaveStatus.PENDING.value,
        reason=payload.reason,
        compensation_method=payload.compensation_method.value if payload.compensation_method else None,
        relationship=payload.relationship,
        overtime_request_ids=[str(oid) for oid in payload.overtime_request_ids],
        auto_calculated=auto_calculated,
        created_by=auth.user_id,
    )
    session.add(leave_request)
    await session.flush()

    record_audit(session, actor_id=auth.user_id, entity=leave_request, action=AuditAction.CREATE)

    await session.commit()
    await session.refresh(leave_request)
    return CreateLeaveRequestResponse(
        request=_build_request_response(leave_request),
        balance=result.balance,
        projected_balance=result.projected_balance,
        message=result.message,
    )


async def approve_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Approve a pending request and apply it to the employee's balance.

    1. Lock the request row; it must be PENDING, and a TOIL request's overtime
       must not be redeemed already.
    2. Lock the summary row for the request's year.
    3. Apply the balance mutation (rejects overdrawing the annual bucket).
    4. Mark the request APPROVED.
    5. Audit log for the request and the summary.
    6. Commit.
    """
    leave_request = await _get_request_or_404(session, request_id, for_update=True)
    _ensure_pending(leave_request, "approve")
    if leave_request.leave_type == LeaveType.TOIL.value:
        await _ensure_overtime_unredeemed(session, leave_request)

    employee = await require_employee(leave_request.employee_id)
    summary, _ = await ensure_summary(session, employee, leave_request.start_date.year, for_update=True)

    request_before = audit_snapshot(leave_request)
    summary_before = audit_snapshot(summary)

    await apply_approval_to_summary(summary, leave_request)

    leave_request.status = LeaveStatus.APPROVED.value
    leave_request.approved_by = auth.user_id
    leave_request.approval_date = datetime.now(UTC)

    await session.flush()

    actor_id = auth.user_id
    record_audit(session, actor_id=actor_id, entity=leave_request, action=AuditAction.APPROVE, before=request_before)
    record_audit(session, actor_id=actor_id, entity=summary, action=AuditAction.APPROVE, before=summary_before)

    await session.commit()
    await session.refresh(leave_request)
    logger.info(
        "Approved %s request %s for employee %s (%s days)",
        leave_request.leave_type,
        leave_request.id,
        leave_request.employee_id,
        leave_request.number_of_days,
    )
    return _build_request_response(leave_request)


async def reject_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    rejection_reason: str | None,
) -> LeaveRequestResponse:
    """Reject a pending request. Balances are not touched."""
    reason = (rejection_reason or "").strip()
    if not reason:
        raise ValidationError("Rejection reason is required and must be a non-empty string")

    leave_request = await _get_request_or_404(session, request_id, for_update=True)
    _ensure_pending(leave_request, "reject")

    before = audit_snapshot(leave_request)

    leave_request.status = LeaveStatus.REJECTED.value
    leave_request.approved_by = auth.user_id
    leave_request.approval_date = datetime.now(UTC)
    leave_request.rejection_reason = reason

    await session.flush()

    record_audit(session, actor_id=auth.user_id, entity=leave_request, action=AuditAction.REJECT, before=before)

    await session.commit()
    await session.refresh(leave_request)
    return _build_request_response(leave_request)


async def get_leave_request(
    session: AsyncSession,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Get a single request by ID."""
    leave_request = await _get_request_or_404(session, request_id)
    return _build_request_response(leave_request)


async def list_leave_requests(
    session: AsyncSession,
    status_filter: LeaveStatus | None = None,
    leave_type: LeaveType | None = None,
    employee_id: uuid.UUID | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LeaveRequestListResponse:
    """List requests with optional filters, ordered by created_at DESC."""
    base_filters = []

    if status_filter is not None:
        base_filters.append(col(LeaveRequest.status) == status_filter.value)
    if leave_type is not None:
        base_filters.append(col(LeaveRequest.leave_type) == leave_type.value)
    if employee_id is not None:
        base_filters.append(col(LeaveRequest.employee_id) == employee_id)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRequest)
        .where(*base_filters)
        .order_by(col(LeaveRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    requests = list(result.scalars().all())

    return LeaveRequestListResponse(
        items=[_build_request_response(r) for r in requests],
        total=total,
    )


async def list_available_overtime(
    session: AsyncSession,
    employee_id: uuid.UUID,
) -> AvailableOvertimeResponse:
    """Approved overtime the employee can still redeem as TOIL.

    Records referenced by a pending or approved TOIL request are left out.
    """
    await require_employee(employee_id)

    records = await get_overtime_service().list_overtime_records(employee_id)
    claimed = await claimed_overtime_ids(session, employee_id)
    available = [r for r in records if r.status == OvertimeStatus.APPROVED and r.id not in claimed]

    total_hours = sum(r.requested_hours for r in available)
    return AvailableOvertimeResponse(
        employee_id=employee_id,
        items=[AvailableOvertimeItem(id=r.id, requested_hours=r.requested_hours) for r in available],
        total_hours=total_hours,
        toil_days=toil_days_from_hours(total_hours),
    )
