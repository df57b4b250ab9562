"""
Leave models
"""
from sqlalchemy import (
    Column,
    Integer,
    Date,
    DateTime,
    ForeignKey,
    String,
    Text,
    Numeric,
    Enum as SQLEnum,
    Boolean,
    UniqueConstraint,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import text
import enum
from leave_ledger.db.base import Base


class LeaveType(str, enum.Enum):
    ANNUAL = "annual"
    SICK = "sick"
    FAMILY = "family"
    STUDY = "study"
    MATERNITY = "maternity"


class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


# Only annual leave is split against, and charged to, the accrued balance
LEDGER_LEAVE_TYPES = (LeaveType.ANNUAL,)


class LeaveTransactionAction(str, enum.Enum):
    APPROVE_DEDUCT = "APPROVE_DEDUCT"
    REVOKE_RESTORE = "REVOKE_RESTORE"


class LeaveBalance(Base):
    """
    Annual leave ledger: one row per (employee_id, year).
    days_remaining = accrued_to_date - days_used, reconciled on every refresh.
    """
    __tablename__ = "leave_balances"

    id = Column(Integer, primary_key=True, index=True)
    # Opaque reference into the employee directory; not owned here
    employee_id = Column(Integer, nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    total_days_allocated = Column(Numeric(5, 2), nullable=False, default=18)
    days_used = Column(Numeric(5, 2), nullable=False, default=0)
    days_remaining = Column(Numeric(5, 2), nullable=False, default=0)
    last_accrual_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("employee_id", "year", name="uq_leave_balances_employee_year"),
        CheckConstraint("days_used >= 0", name="check_days_used_non_negative"),
    )


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, nullable=False, index=True)
    employee_name = Column(String(255), nullable=True)
    leave_type = Column(SQLEnum(LeaveType, values_callable=lambda e: [m.value for m in e]), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=True)
    status = Column(
        SQLEnum(LeaveStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=LeaveStatus.PENDING,
    )
    # Snapshot taken at submission; approval deducts exactly days_paid
    days_requested = Column(Numeric(5, 2), nullable=False)
    days_paid = Column(Numeric(5, 2), nullable=False, default=0)
    days_unpaid = Column(Numeric(5, 2), nullable=False, default=0)
    is_fully_paid = Column(Boolean, nullable=False, default=True)
    created_by = Column(String(255), nullable=True)
    approved_by = Column(String(255), nullable=True)
    comments = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    transactions = relationship("LeaveTransaction", back_populates="leave_request", passive_deletes=True)

    __table_args__ = (
        Index("ix_leave_requests_employee_dates", "employee_id", "start_date", "end_date"),
        CheckConstraint("start_date <= end_date", name="check_start_date_le_end_date"),
    )

    @property
    def balance_year(self) -> int:
        return self.start_date.year


class LeaveTransaction(Base):
    """Audit trail for the ledger: approval deducts and revocation restores."""
    __tablename__ = "leave_transactions"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, nullable=False, index=True)
    leave_id = Column(Integer, ForeignKey("leave_requests.id", ondelete="SET NULL"), nullable=True, index=True)
    year = Column(Integer, nullable=False, index=True)
    delta_days = Column(Numeric(5, 2), nullable=False)  # + for restore, - for deduct
    action = Column(String(30), nullable=False)
    remarks = Column(Text, nullable=True)
    action_by = Column(String(255), nullable=True)
    action_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)

    leave_request = relationship("LeaveRequest", back_populates="transactions")
