from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel

from leave_engine.config import get_settings
from leave_engine.db import SessionDep, database_reachable

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Liveness plus database reachability."""

    status: Literal["ok", "degraded"]
    service: str
    version: str
    environment: str
    database: bool


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Always 200; ``degraded`` when the leave store cannot be reached."""
    settings = get_settings()
    database_ok = await database_reachable(session)
    return HealthResponse(
        status="ok" if database_ok else "degraded",
        service=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        database=database_ok,
    )
