from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from leave_engine.api.health import router as health_router
from leave_engine.api.router import api_router
from leave_engine.config import configure_logging, get_settings
from leave_engine.db import dispose_engine
from leave_engine.exceptions import setup_exception_handlers
from leave_engine.middleware import setup_middleware

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

OPENAPI_TAGS = [
    {"name": "leave-requests", "description": "File, approve and reject leave requests."},
    {"name": "balances", "description": "Per-type leave balances for one employee and year."},
    {"name": "reports", "description": "Organisation-wide leave summaries (admin only)."},
    {"name": "jobs", "description": "Recomputation and year-end carry-over triggers (admin only)."},
    {"name": "health", "description": "Liveness and database reachability."},
]


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Log the active leave policy on startup and release the database pool on shutdown."""
    settings = get_settings()
    configure_logging(settings)
    logger.info("Starting %s v%s [%s]", settings.app_name, settings.app_version, settings.environment)
    logger.info(
        "Leave policy: carry-over cap=%g days, WFH limits=%d/week %d/month",
        settings.max_carry_over_days,
        settings.wfh_weekly_limit,
        settings.wfh_monthly_limit,
    )
    yield
    await dispose_engine()
    logger.info("Shut down %s", settings.app_name)


def create_app() -> FastAPI:
    settings = get_settings()
    docs_enabled = settings.environment != "production"

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Leave entitlements, balances and the request approval lifecycle.",
        debug=settings.debug,
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
    )

    setup_middleware(application, settings)
    setup_exception_handlers(application)

    application.include_router(health_router)
    application.include_router(api_router)

    return application


app = create_app()
