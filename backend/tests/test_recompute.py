"""Tests for balance recomputation from approved requests."""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlmodel import col

from leave_engine.exceptions import ConflictError
from leave_engine.models.audit import AuditLog
from leave_engine.models.enums import AuditAction, CompensationMethod, Gender, LeaveStatus, LeaveType, OvertimeStatus
from leave_engine.models.request import LeaveRequest
from leave_engine.services import recompute
from leave_engine.services.employee import EmployeeInfo
from leave_engine.services.overtime import OvertimeRecord
from leave_engine.services.recompute import run_recomputation
from leave_engine.services.summary import find_summary, get_or_create_leave_summary

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.services.employee import InMemoryEmployeeService
    from leave_engine.services.overtime import InMemoryOvertimeService

TODAY = date(2025, 6, 15)
EMPLOYEE_ID = uuid.uuid4()
ADMIN_ID = uuid.uuid4()


@pytest.fixture(autouse=True)
def _seed_employee(employee_service: InMemoryEmployeeService) -> None:
    employee_service.seed(
        EmployeeInfo(
            id=EMPLOYEE_ID,
            first_name="Layla",
            last_name="Haddad",
            email="layla@example.com",
            gender=Gender.FEMALE,
            hire_date=date(2019, 5, 1),
        )
    )


async def _add_request(
    session: AsyncSession,
    leave_type: LeaveType,
    start: date,
    days: float = 1,
    status: LeaveStatus = LeaveStatus.APPROVED,
    employee_id: uuid.UUID = EMPLOYEE_ID,
    **kwargs: Any,
) -> LeaveRequest:
    request = LeaveRequest(
        employee_id=employee_id,
        leave_type=leave_type.value,
        start_date=start,
        end_date=start,
        number_of_days=days,
        status=status.value,
        reason="Recorded",
        **kwargs,
    )
    session.add(request)
    await session.commit()
    return request


async def test_replays_approved_usage(db_session: AsyncSession) -> None:
    await _add_request(db_session, LeaveType.ANNUAL, date(2025, 2, 10), days=4)
    await _add_request(db_session, LeaveType.SICK, date(2025, 3, 3), days=2)
    await _add_request(
        db_session,
        LeaveType.EMERGENCY,
        date(2025, 3, 20),
        compensation_method=CompensationMethod.ANNUAL_LEAVE.value,
    )
    await _add_request(db_session, LeaveType.EMERGENCY, date(2025, 4, 2), compensation_method="unpaid")
    await _add_request(db_session, LeaveType.ANNUAL, date(2025, 5, 5), days=9, status=LeaveStatus.PENDING)
    await _add_request(db_session, LeaveType.ANNUAL, date(2025, 5, 12), days=9, status=LeaveStatus.REJECTED)

    result = await run_recomputation(db_session, TODAY)

    assert result.created_count == 1
    assert result.skipped == []
    summary = await find_summary(db_session, EMPLOYEE_ID, 2025)
    assert summary is not None
    assert summary.annual_leave_used == 5
    assert summary.sick_leave_used == 2
    assert summary.emergency_leave_used == 1
    assert summary.annual_leave_entitlement == 30


async def test_corrects_drifted_counters(db_session: AsyncSession) -> None:
    await _add_request(db_session, LeaveType.ANNUAL, date(2025, 2, 10), days=3)
    summary = await get_or_create_leave_summary(db_session, EMPLOYEE_ID, 2025)
    summary.annual_leave_used = 11
    summary.maternity_leave_used = 7
    await db_session.commit()

    result = await run_recomputation(db_session, TODAY)

    assert result.updated_count == 1
    assert result.created_count == 0
    await db_session.refresh(summary)
    assert summary.annual_leave_used == 3
    assert summary.maternity_leave_used == 0
    assert summary.version == 2


async def test_is_idempotent(db_session: AsyncSession) -> None:
    await _add_request(db_session, LeaveType.ANNUAL, date(2025, 2, 10), days=3)
    await _add_request(db_session, LeaveType.WFH, date(2025, 6, 10))

    await run_recomputation(db_session, TODAY)
    summary = await find_summary(db_session, EMPLOYEE_ID, 2025)
    assert summary is not None
    version = summary.version

    second = await run_recomputation(db_session, TODAY)

    assert second.updated_count == 0
    assert second.created_count == 0
    await db_session.refresh(summary)
    assert summary.version == version
    assert summary.annual_leave_used == 3


async def test_rebuilds_wfh_counters(db_session: AsyncSession) -> None:
    for day in (date(2025, 3, 4), date(2025, 3, 11), date(2025, 3, 18), date(2025, 4, 1)):
        await _add_request(db_session, LeaveType.WFH, day)

    await run_recomputation(db_session, TODAY)

    summary = await find_summary(db_session, EMPLOYEE_ID, 2025)
    assert summary is not None
    assert summary.wfh_used_this_month == 3
    assert summary.wfh_used_this_week == 1
    assert summary.wfh_last_week_start == date(2025, 3, 2)


async def test_keeps_last_week_start_without_wfh(db_session: AsyncSession) -> None:
    summary = await get_or_create_leave_summary(db_session, EMPLOYEE_ID, 2025)
    summary.wfh_last_week_start = date(2025, 1, 5)
    summary.wfh_used_this_week = 1
    await db_session.commit()

    await run_recomputation(db_session, TODAY)

    await db_session.refresh(summary)
    assert summary.wfh_used_this_week == 0
    assert summary.wfh_last_week_start == date(2025, 1, 5)


async def test_replays_toil_hours(db_session: AsyncSession, overtime_service: InMemoryOvertimeService) -> None:
    overtime_id = uuid.uuid4()
    overtime_service.seed(
        OvertimeRecord(id=overtime_id, employee_id=EMPLOYEE_ID, requested_hours=10, status=OvertimeStatus.APPROVED)
    )
    await _add_request(db_session, LeaveType.TOIL, date(2025, 4, 8), overtime_request_ids=[str(overtime_id)])

    await run_recomputation(db_session, TODAY)

    summary = await find_summary(db_session, EMPLOYEE_ID, 2025)
    assert summary is not None
    assert summary.toil_hours_used == 10


async def test_requests_grouped_by_start_year(db_session: AsyncSession) -> None:
    await _add_request(db_session, LeaveType.ANNUAL, date(2024, 12, 30), days=4)
    await _add_request(db_session, LeaveType.ANNUAL, date(2025, 1, 6), days=1)

    result = await run_recomputation(db_session, TODAY)

    assert result.created_count == 2
    previous = await find_summary(db_session, EMPLOYEE_ID, 2024)
    current = await find_summary(db_session, EMPLOYEE_ID, 2025)
    assert previous is not None
    assert current is not None
    assert previous.annual_leave_used == 4
    assert current.annual_leave_used == 1


async def test_creates_current_year_summary(db_session: AsyncSession) -> None:
    result = await run_recomputation(db_session, TODAY)

    assert result.created_count == 1
    summary = await find_summary(db_session, EMPLOYEE_ID, 2025)
    assert summary is not None
    assert summary.annual_leave_used == 0


async def test_skips_employee_without_hire_date(
    db_session: AsyncSession,
    employee_service: InMemoryEmployeeService,
) -> None:
    undated_id = uuid.uuid4()
    employee_service.seed(
        EmployeeInfo(id=undated_id, first_name="No", last_name="Date", email="nodate@example.com")
    )
    await _add_request(db_session, LeaveType.ANNUAL, date(2025, 2, 10), days=2, employee_id=undated_id)
    await _add_request(db_session, LeaveType.ANNUAL, date(2025, 2, 10), days=2)

    result = await run_recomputation(db_session, TODAY)

    assert [s.employee_id for s in result.skipped] == [undated_id]
    assert "hire date" in result.skipped[0].reason
    assert await find_summary(db_session, undated_id, 2025) is None
    healthy = await find_summary(db_session, EMPLOYEE_ID, 2025)
    assert healthy is not None
    assert healthy.annual_leave_used == 2


async def test_skips_unknown_employee(db_session: AsyncSession) -> None:
    stranger = uuid.uuid4()
    await _add_request(db_session, LeaveType.SICK, date(2025, 2, 10), employee_id=stranger)

    result = await run_recomputation(db_session, TODAY)

    assert [s.employee_id for s in result.skipped] == [stranger]
    assert await find_summary(db_session, stranger, 2025) is None


async def test_store_failure_aborts_the_run(db_session: AsyncSession, monkeypatch: pytest.MonkeyPatch) -> None:
    await _add_request(db_session, LeaveType.SICK, date(2025, 2, 10))

    async def _connection_lost(*args: Any, **kwargs: Any) -> None:
        raise OperationalError("SELECT leave_summary", {}, Exception("connection lost"))

    monkeypatch.setattr(recompute, "_recompute_employee", _connection_lost)

    with pytest.raises(OperationalError):
        await run_recomputation(db_session, TODAY)
    assert not recompute._recompute_lock.locked()



async def test_writes_audit_entry_on_change(db_session: AsyncSession) -> None:
    await _add_request(db_session, LeaveType.SICK, date(2025, 2, 10))

    await run_recomputation(db_session, TODAY)

    rows = await db_session.execute(select(AuditLog).where(col(AuditLog.action) == AuditAction.RECOMPUTE.value))
    entries = rows.scalars().all()
    assert len(entries) == 1
    assert entries[0].after_json is not None
    assert entries[0].after_json["sick_leave_used"] == 1


async def test_concurrent_run_is_rejected(db_session: AsyncSession) -> None:
    async with recompute._recompute_lock:
        with pytest.raises(ConflictError):
            await run_recomputation(db_session, TODAY)


async def test_api_requires_admin(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        "/jobs/recompute",
        headers={"X-User-Id": str(EMPLOYEE_ID), "X-Role": "employee"},
    )
    assert resp.status_code == 403


async def test_api_runs_recomputation(async_client: AsyncClient) -> None:
    resp = await async_client.post("/jobs/recompute", headers={"X-User-Id": str(ADMIN_ID), "X-Role": "admin"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["created_count"] == 1
    assert data["updated_count"] == 0
    assert data["skipped"] == []
