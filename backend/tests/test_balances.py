"""Tests for the leave balance snapshot endpoint."""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

import pytest

from leave_engine.models.enums import Gender
from leave_engine.services.employee import EmployeeInfo
from leave_engine.services.summary import find_summary, get_or_create_leave_summary

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_engine.services.employee import InMemoryEmployeeService

EMPLOYEE_ID = uuid.uuid4()
NEW_HIRE_ID = uuid.uuid4()
EMPLOYEE_HEADERS = {"X-User-Id": str(EMPLOYEE_ID), "X-Role": "employee"}
ADMIN_HEADERS = {"X-User-Id": str(uuid.uuid4()), "X-Role": "admin"}


@pytest.fixture(autouse=True)
def _seed_employees(employee_service: InMemoryEmployeeService) -> None:
    employee_service.seed(
        EmployeeInfo(
            id=EMPLOYEE_ID,
            first_name="Huda",
            last_name="Mansour",
            email="huda@example.com",
            gender=Gender.FEMALE,
            hire_date=date(2020, 3, 1),
        )
    )
    employee_service.seed(
        EmployeeInfo(
            id=NEW_HIRE_ID,
            first_name="Tariq",
            last_name="Fares",
            email="tariq@example.com",
            gender=Gender.MALE,
            hire_date=date(2025, 3, 10),
        )
    )


def _url(employee_id: uuid.UUID, year: int = 2025) -> str:
    return f"/employees/{employee_id}/leave-balance?year={year}"


async def test_first_read_creates_summary_with_defaults(
    async_client: AsyncClient,
    db_session: AsyncSession,
) -> None:
    resp = await async_client.get(_url(EMPLOYEE_ID), headers=EMPLOYEE_HEADERS)

    assert resp.status_code == 200
    data = resp.json()
    assert data["year"] == 2025
    assert data["version"] == 1
    assert data["annual"] == {"entitlement": 30, "carried_over": 0, "used": 0, "available": 30}
    assert data["sick"]["total"] == 90
    assert data["sick"]["remaining"] == 90
    assert data["maternity"]["entitlement"] == 60
    assert data["emergency"]["entitlement"] == 5
    assert data["wfh"]["weekly_limit"] == 1
    assert data["wfh"]["monthly_limit"] == 4
    assert data["wfh"]["remaining_this_month"] == 4
    assert data["toil"]["days_available"] == 0

    assert await find_summary(db_session, EMPLOYEE_ID, 2025) is not None


async def test_prorated_entitlement_for_new_hire(async_client: AsyncClient) -> None:
    resp = await async_client.get(_url(NEW_HIRE_ID), headers=ADMIN_HEADERS)

    assert resp.status_code == 200
    # Mar 10 -> Dec 31 is nine full months: 2 days for each month after the sixth.
    assert resp.json()["annual"]["entitlement"] == 6


async def test_snapshot_reflects_stored_usage(async_client: AsyncClient, db_session: AsyncSession) -> None:
    summary = await get_or_create_leave_summary(db_session, EMPLOYEE_ID, 2025)
    summary.annual_leave_used = 7.5
    summary.annual_leave_carried_over = 3
    summary.sick_leave_used = 4
    summary.toil_hours_available = 20
    summary.toil_hours_used = 8
    summary.wfh_used_this_month = 3
    await db_session.commit()

    resp = await async_client.get(_url(EMPLOYEE_ID), headers=EMPLOYEE_HEADERS)

    data = resp.json()
    assert data["annual"]["available"] == 25.5
    assert data["sick"]["remaining"] == 86
    assert data["toil"] == {
        "hours_available": 20,
        "hours_used": 8,
        "hours_remaining": 12,
        "days_available": 1,
        "days_used": 1,
    }
    assert data["wfh"]["remaining_this_month"] == 1


async def test_stale_entitlement_is_healed(async_client: AsyncClient, db_session: AsyncSession) -> None:
    summary = await get_or_create_leave_summary(db_session, EMPLOYEE_ID, 2025)
    summary.annual_leave_entitlement = 12
    await db_session.commit()

    resp = await async_client.get(_url(EMPLOYEE_ID), headers=EMPLOYEE_HEADERS)

    assert resp.json()["annual"]["entitlement"] == 30
    assert resp.json()["version"] == 2


async def test_employee_cannot_read_someone_else(async_client: AsyncClient) -> None:
    resp = await async_client.get(_url(NEW_HIRE_ID), headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403


async def test_unknown_employee_is_not_found(async_client: AsyncClient) -> None:
    resp = await async_client.get(_url(uuid.uuid4()), headers=ADMIN_HEADERS)
    assert resp.status_code == 404


async def test_missing_auth_header_is_rejected(async_client: AsyncClient) -> None:
    resp = await async_client.get(_url(EMPLOYEE_ID))
    assert resp.status_code == 422
