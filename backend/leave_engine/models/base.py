"""Column definitions shared by the leave tables."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def now_utc() -> datetime:
    return datetime.now(UTC)


def counter_field(default: int = 0) -> Any:
    """Non-null numeric column whose Python and server defaults agree."""
    return Field(default=default, sa_column_kwargs={"server_default": str(default)})


class UUIDBase(SQLModel):
    """Primary key shared by every table."""

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        sa_type=sa.Uuid,
    )


class TimestampMixin(SQLModel):
    created_at: datetime = Field(
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )


class VersionedMixin(SQLModel):
    """Row version plus last-modified time.

    ``version`` starts at 1 and moves only when a stored value changes, so an
    unchanged version after a batch job means the row was left alone.
    """

    updated_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),
        # Python-side onupdate keeps the new value loaded after a flush.
        sa_column_kwargs={"server_default": sa.func.now(), "onupdate": now_utc},
    )
    version: int = counter_field(1)

    def bump_version(self) -> None:
        self.version += 1
