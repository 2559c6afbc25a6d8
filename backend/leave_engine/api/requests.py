# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from leave_engine.api.deps import AdminDep, AuthDep, ensure_self_or_admin
from leave_engine.db import SessionDep
from leave_engine.models.enums import LeaveStatus, LeaveType
from leave_engine.schemas.request import (
    AvailableOvertimeResponse,
    CreateLeaveRequestPayload,
    CreateLeaveRequestResponse,
    LeaveRequestListResponse,
    LeaveRequestResponse,
    RejectPayload,
)
from leave_engine.services import request as request_service

requests_router = APIRouter(
    prefix="/leave-requests",
    tags=["leave-requests"],
)


@requests_router.post("", response_model=CreateLeaveRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_leave_request(
    payload: CreateLeaveRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> CreateLeaveRequestResponse:
    """Validate and file a new leave request."""
    return await request_service.create_leave_request(session, auth, payload)


@requests_router.get("", response_model=LeaveRequestListResponse)
async def list_leave_requests(
    session: SessionDep,
    auth: AuthDep,
    status_filter: LeaveStatus | None = Query(default=None, alias="status"),
    leave_type: LeaveType | None = Query(default=None),
    employee_id: uuid.UUID | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LeaveRequestListResponse:
    """List leave requests. Employees only see their own."""
    if not auth.is_admin:
        employee_id = auth.user_id
    return await request_service.list_leave_requests(session, status_filter, leave_type, employee_id, offset, limit)


@requests_router.get("/available-overtime", response_model=AvailableOvertimeResponse)
async def list_available_overtime(
    session: SessionDep,
    auth: AuthDep,
    employee_id: uuid.UUID | None = Query(default=None),
) -> AvailableOvertimeResponse:
    """Approved overtime not yet used by a TOIL request. Defaults to the caller."""
    employee_id = employee_id or auth.user_id
    ensure_self_or_admin(auth, employee_id)
    return await request_service.list_available_overtime(session, employee_id)


@requests_router.get("/{request_id}", response_model=LeaveRequestResponse)

async def get_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Get a single leave request."""
    response = await request_service.get_leave_request(session, request_id)
    ensure_self_or_admin(auth, response.employee_id)
    return response


@requests_router.post("/{request_id}/approve", response_model=LeaveRequestResponse)
async def approve_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> LeaveRequestResponse:
    """Approve a pending leave request and update the balance (admin only)."""
    return await request_service.approve_leave_request(session, auth, request_id)


@requests_router.post("/{request_id}/reject", response_model=LeaveRequestResponse)
async def reject_leave_request(
    request_id: uuid.UUID,
    payload: RejectPayload,
    session: SessionDep,
    auth: AdminDep,
) -> LeaveRequestResponse:
    """Reject a pending leave request (admin only)."""
    return await request_service.reject_leave_request(session, auth, request_id, payload.rejection_reason)
