"""leave engine schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _days(name: str, default: str) -> sa.Column:
    return sa.Column(name, sa.Float(), nullable=False, server_default=default)


def upgrade() -> None:
    op.create_table(
        "leave_summary",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        _days("annual_leave_entitlement", "0"),
        _days("annual_leave_used", "0"),
        _days("annual_leave_carried_over", "0"),
        _days("sick_leave_full_pay", "15"),
        _days("sick_leave_half_pay", "30"),
        _days("sick_leave_unpaid", "45"),
        _days("sick_leave_used", "0"),
        _days("maternity_leave_entitlement", "60"),
        _days("maternity_leave_used", "0"),
        _days("emergency_leave_entitlement", "5"),
        _days("emergency_leave_used", "0"),
        _days("toil_hours_available", "0"),
        _days("toil_hours_used", "0"),
        sa.Column("wfh_weekly_limit", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("wfh_monthly_limit", sa.Integer(), nullable=False, server_default="4"),
        sa.Column("wfh_used_this_week", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("wfh_used_this_month", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("wfh_last_week_start", sa.Date(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.UniqueConstraint("employee_id", "year", name="uq_leave_summary_employee_year"),
    )
    op.create_index("ix_leave_summary_employee_id", "leave_summary", ["employee_id"])
    op.create_index("ix_leave_summary_year", "leave_summary", ["year"])

    op.create_table(
        "leave_request",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("employee_id", sa.Uuid(), nullable=False),
        sa.Column("leave_type", sa.String(length=50), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("is_half_day", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("number_of_days", sa.Float(), nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False, server_default="PENDING"),
        sa.Column("reason", sa.String(), nullable=False),
        sa.Column("compensation_method", sa.String(length=50), nullable=True),
        sa.Column("relationship", sa.String(length=100), nullable=True),
        sa.Column("overtime_request_ids", sa.JSON(), nullable=False),
        sa.Column("auto_calculated", sa.JSON(), nullable=True),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        sa.Column("approved_by", sa.Uuid(), nullable=True),
        sa.Column("approval_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.String(), nullable=True),
    )
    op.create_index("ix_leave_request_employee_id", "leave_request", ["employee_id"])
    op.create_index(
        "ix_leave_request_employee_type_start", "leave_request", ["employee_id", "leave_type", "start_date"]
    )
    op.create_index("ix_leave_request_status", "leave_request", ["status"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("actor_id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("before_json", sa.JSON(), nullable=True),
        sa.Column("after_json", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_audit_entity", "audit_log", ["entity_type", "entity_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("leave_request")
    op.drop_table("leave_summary")
