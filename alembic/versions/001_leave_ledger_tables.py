"""Leave ledger: leave_balances, leave_requests, leave_transactions.

Revision ID: 001_leave_ledger
Revises:
Create Date: 2026-10-19

- leave_balances: one row per (employee_id, year), unique.
- leave_requests: submitted requests with their paid/unpaid snapshot.
- leave_transactions: audit trail of approval deducts and revocation restores.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001_leave_ledger"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "leave_balances",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("total_days_allocated", sa.Numeric(5, 2), nullable=False, server_default="18"),
        sa.Column("days_used", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("days_remaining", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("last_accrual_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_id", "year", name="uq_leave_balances_employee_year"),
        sa.CheckConstraint("days_used >= 0", name="check_days_used_non_negative"),
    )
    op.create_index(op.f("ix_leave_balances_id"), "leave_balances", ["id"], unique=False)
    op.create_index(op.f("ix_leave_balances_employee_id"), "leave_balances", ["employee_id"], unique=False)
    op.create_index(op.f("ix_leave_balances_year"), "leave_balances", ["year"], unique=False)

    op.create_table(
        "leave_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("employee_name", sa.String(255), nullable=True),
        sa.Column(
            "leave_type",
            sa.Enum("annual", "sick", "family", "study", "maternity", name="leavetype"),
            nullable=False,
        ),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("pending", "approved", "rejected", "cancelled", name="leavestatus"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("days_requested", sa.Numeric(5, 2), nullable=False),
        sa.Column("days_paid", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("days_unpaid", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("is_fully_paid", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.Column("approved_by", sa.String(255), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("start_date <= end_date", name="check_start_date_le_end_date"),
    )
    op.create_index(op.f("ix_leave_requests_id"), "leave_requests", ["id"], unique=False)
    op.create_index(op.f("ix_leave_requests_employee_id"), "leave_requests", ["employee_id"], unique=False)
    op.create_index(
        "ix_leave_requests_employee_dates", "leave_requests", ["employee_id", "start_date", "end_date"], unique=False
    )

    op.create_table(
        "leave_transactions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("leave_id", sa.Integer(), nullable=True),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("delta_days", sa.Numeric(5, 2), nullable=False),
        sa.Column("action", sa.String(30), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("action_by", sa.String(255), nullable=True),
        sa.Column("action_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["leave_id"], ["leave_requests.id"], ondelete="SET NULL"),
    )
    op.create_index(op.f("ix_leave_transactions_id"), "leave_transactions", ["id"], unique=False)
    op.create_index(op.f("ix_leave_transactions_employee_id"), "leave_transactions", ["employee_id"], unique=False)
    op.create_index(op.f("ix_leave_transactions_leave_id"), "leave_transactions", ["leave_id"], unique=False)
    op.create_index(op.f("ix_leave_transactions_year"), "leave_transactions", ["year"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_leave_transactions_year"), table_name="leave_transactions")
    op.drop_index(op.f("ix_leave_transactions_leave_id"), table_name="leave_transactions")
    op.drop_index(op.f("ix_leave_transactions_employee_id"), table_name="leave_transactions")
    op.drop_index(op.f("ix_leave_transactions_id"), table_name="leave_transactions")
    op.drop_table("leave_transactions")
    op.drop_index("ix_leave_requests_employee_dates", table_name="leave_requests")
    op.drop_index(op.f("ix_leave_requests_employee_id"), table_name="leave_requests")
    op.drop_index(op.f("ix_leave_requests_id"), table_name="leave_requests")
    op.drop_table("leave_requests")
    op.drop_index(op.f("ix_leave_balances_year"), table_name="leave_balances")
    op.drop_index(op.f("ix_leave_balances_employee_id"), table_name="leave_balances")
    op.drop_index(op.f("ix_leave_balances_id"), table_name="leave_balances")
    op.drop_table("leave_balances")
    sa.Enum(name="leavestatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="leavetype").drop(op.get_bind(), checkfirst=True)
