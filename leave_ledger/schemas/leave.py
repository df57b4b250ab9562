"""
Leave schemas
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, Field, ConfigDict, field_serializer, model_validator

from leave_ledger.models.leave import LeaveType, LeaveStatus
from leave_ledger.utils.datetime_utils import iso_8601_utc


class LeaveCreateRequest(BaseModel):
    """Schema for submitting a leave request"""
    employee_id: int = Field(..., description="Employee identifier from the directory")
    employee_name: Optional[str] = Field(None, description="Display name of the employee")
    leave_type: LeaveType = Field(..., description="Type of leave")
    start_date: date = Field(..., description="First day of leave (inclusive)")
    end_date: date = Field(..., description="Last day of leave (inclusive)")
    reason: Optional[str] = Field(None, description="Reason for leave")

    @model_validator(mode="after")
    def check_date_order(self) -> "LeaveCreateRequest":
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class LeaveStatusUpdate(BaseModel):
    """Schema for changing a leave request's status"""
    status: LeaveStatus = Field(..., description="New status")
    comments: Optional[str] = Field(None, description="Approver comments")


class LeaveOut(BaseModel):
    """Schema for leave request output"""
    id: int
    employee_id: int
    employee_name: Optional[str]
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: Optional[str]
    status: LeaveStatus
    days_requested: Decimal
    days_paid: Decimal
    days_unpaid: Decimal
    is_fully_paid: bool
    created_by: Optional[str]
    approved_by: Optional[str]
    comments: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("days_requested", "days_paid", "days_unpaid")
    def _ser_days(self, v: Decimal) -> float:
        return float(v)

    @field_serializer("created_at", "updated_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class LeaveListResponse(BaseModel):
    """Schema for leave list response"""
    items: List[LeaveOut]
    total: int


# --- Annual leave ledger ---


class SplitRequest(BaseModel):
    """Schema for previewing the paid/unpaid split of a prospective request"""
    leave_type: LeaveType = Field(LeaveType.ANNUAL, description="Type of leave")
    start_date: date
    end_date: date


class SplitOut(BaseModel):
    days_requested: float
    days_paid: float
    days_unpaid: float
    is_fully_paid: bool
    remaining_balance: Optional[float] = Field(None, description="Live available days the split was based on")


class LedgerAdjustRequest(BaseModel):
    """Apply or revoke an approval directly against the ledger"""
    year: int = Field(..., ge=1900, le=9999)
    days_paid: Decimal = Field(..., ge=0, description="Paid days recorded on the request")


class BalanceOut(BaseModel):
    """One (employee, year) ledger row"""
    employee_id: int
    year: int
    total_days_allocated: float
    days_used: float
    days_remaining: float
    last_accrual_date: Optional[date]

    model_config = ConfigDict(from_attributes=True)


class BalanceSummaryOut(BaseModel):
    """Balance widget read model; 'error' is set when defaults were served"""
    employee_id: int
    year: int
    total_allocated: float
    accrued_to_date: float
    days_used: float
    days_remaining: float
    last_accrual_date: date
    error: Optional[str] = None


class TransactionOut(BaseModel):
    id: int
    employee_id: int
    leave_id: Optional[int]
    year: int
    delta_days: float
    action: str
    remarks: Optional[str]
    action_by: Optional[str]
    action_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("action_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)
