"""
Database models
"""
from leave_ledger.models.leave import (
    LeaveBalance,
    LeaveRequest,
    LeaveTransaction,
    LeaveType,
    LeaveStatus,
    LeaveTransactionAction,
    LEDGER_LEAVE_TYPES,
)

__all__ = [
    "LeaveBalance",
    "LeaveRequest",
    "LeaveTransaction",
    "LeaveType",
    "LeaveStatus",
    "LeaveTransactionAction",
    "LEDGER_LEAVE_TYPES",
]
