"""Shared fixtures: in-memory SQLite database, HTTP client and collaborator stubs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from leave_engine.db import get_session
from leave_engine.main import app
from leave_engine.models import SQLModel
from leave_engine.services.employee import InMemoryEmployeeService, set_employee_service
from leave_engine.services.overtime import InMemoryOvertimeService, set_overtime_service

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

engine = create_async_engine(
    "sqlite+aiosqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# pysqlite defers BEGIN until the first DML statement, which breaks SAVEPOINT.
# Take over transaction control so begin_nested() behaves as on PostgreSQL.
@event.listens_for(engine.sync_engine, "connect")
def _disable_pysqlite_transactions(dbapi_connection: Any, connection_record: Any) -> None:
    dbapi_connection.isolation_level = None


@event.listens_for(engine.sync_engine, "begin")
def _emit_begin(conn: Any) -> None:
    conn.exec_driver_sql("BEGIN")


TestSessionFactory = async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture(autouse=True)
async def _setup_db() -> AsyncIterator[None]:
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


@pytest.fixture(autouse=True)
def employee_service() -> Iterator[InMemoryEmployeeService]:
    """Install a fresh employee stub for every test."""
    svc = InMemoryEmployeeService()
    set_employee_service(svc)
    yield svc
    set_employee_service(InMemoryEmployeeService())


@pytest.fixture(autouse=True)
def overtime_service() -> Iterator[InMemoryOvertimeService]:
    """Install a fresh overtime stub for every test."""
    svc = InMemoryOvertimeService()
    set_overtime_service(svc)
    yield svc
    set_overtime_service(InMemoryOvertimeService())


@pytest.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    async with TestSessionFactory() as session:
        yield session


@pytest.fixture
async def async_client() -> AsyncIterator[AsyncClient]:
    """Async HTTP client; every request gets its own session, as in production."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        async with TestSessionFactory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
