from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.middleware.cors import CORSMiddleware

if TYPE_CHECKING:
    from fastapi import FastAPI

    from leave_engine.config import Settings


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Let the configured front-end origins read balances and file or decide requests."""
    app.add_middleware(
        CORSMiddleware,  # ty: ignore[invalid-argument-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        # The API only reads and posts; identity travels in the dev auth headers.
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "X-User-Id", "X-Role"],
    )
