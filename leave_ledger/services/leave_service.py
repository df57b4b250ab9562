"""
Leave service - request sizing, paid/unpaid split, and status transitions.

The split is a snapshot taken at submission: approval later deducts exactly
the days_paid stored on the request, even if the live balance has moved.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from leave_ledger.core.constants import ZERO_DAYS
from leave_ledger.models.leave import (
    LeaveRequest,
    LeaveStatus,
    LeaveType,
    LEDGER_LEAVE_TYPES,
)
from leave_ledger.services import leave_wallet_service as wallet
from leave_ledger.services.accrual_service import calculate_accrued_days, round_days
from leave_ledger.services.holiday_calendar import HolidayCalendar
from leave_ledger.services.leave_days_service import size_leave_request
from leave_ledger.utils.datetime_utils import resolve_as_of

logger = logging.getLogger(__name__)


def calculate_paid_unpaid_days(
    db: Session,
    employee_id: int,
    days_requested: Decimal,
    year: int,
    as_of_date: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Split requested annual days into paid and unpaid against the live balance.

    Available days are recomputed from the accrual curve rather than read from
    the stored days_remaining, which may be stale.
    """
    as_of = resolve_as_of(as_of_date)
    days_requested = round_days(days_requested)
    balance = wallet.refresh_accrual(db, employee_id, year, as_of_date=as_of)
    days_available = round_days(calculate_accrued_days(as_of) - Decimal(balance.days_used or 0))

    if days_available >= days_requested:
        days_paid, days_unpaid, fully_paid = days_requested, ZERO_DAYS, True
    elif days_available > 0:
        days_paid = days_available
        days_unpaid, fully_paid = days_requested - days_paid, False
    else:
        days_paid, days_unpaid, fully_paid = ZERO_DAYS, days_requested, False

    return {
        "days_paid": days_paid,
        "days_unpaid": days_unpaid,
        "is_fully_paid": fully_paid,
        "remaining_balance": days_available,
    }


def split_request_days(
    db: Session,
    employee_id: int,
    leave_type: LeaveType,
    start_date: date,
    end_date: date,
    as_of_date: Optional[date] = None,
    calendar: Optional[HolidayCalendar] = None,
) -> Dict[str, Any]:
    """Size a prospective request and decide its paid/unpaid split."""
    if start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must be on or before end_date",
        )
    days_requested = size_leave_request(start_date, end_date, calendar)

    if leave_type not in LEDGER_LEAVE_TYPES:
        return {
            "days_requested": days_requested,
            "days_paid": days_requested,
            "days_unpaid": ZERO_DAYS,
            "is_fully_paid": True,
            "remaining_balance": None,
        }

    split = calculate_paid_unpaid_days(
        db, employee_id, days_requested, start_date.year, as_of_date=as_of_date
    )
    return {"days_requested": days_requested, **split}


def create_leave_request(
    db: Session,
    employee_id: int,
    leave_type: LeaveType,
    start_date: date,
    end_date: date,
    reason: Optional[str] = None,
    employee_name: Optional[str] = None,
    created_by: Optional[str] = None,
    as_of_date: Optional[date] = None,
    calendar: Optional[HolidayCalendar] = None,
) -> LeaveRequest:
    """Persist a pending request with its split. The balance is not touched."""
    split = split_request_days(
        db, employee_id, leave_type, start_date, end_date,
        as_of_date=as_of_date, calendar=calendar,
    )
    leave = LeaveRequest(
        employee_id=employee_id,
        employee_name=employee_name or created_by,
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        reason=reason or "",
        status=LeaveStatus.PENDING,
        days_requested=split["days_requested"],
        days_paid=split["days_paid"],
        days_unpaid=split["days_unpaid"],
        is_fully_paid=split["is_fully_paid"],
        created_by=created_by,
    )
    db.add(leave)
    db.commit()
    db.refresh(leave)
    logger.info(
        "Leave request %s created employee_id=%s type=%s requested=%s paid=%s unpaid=%s",
        leave.id, employee_id, leave_type.value, leave.days_requested, leave.days_paid, leave.days_unpaid,
    )
    return leave


def get_leave_request(db: Session, leave_id: int) -> LeaveRequest:
    leave = db.query(LeaveRequest).filter(LeaveRequest.id == leave_id).first()
    if not leave:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Leave request not found")
    return leave


def list_leave_requests(
    db: Session,
    employee_id: Optional[int] = None,
    status_filter: Optional[LeaveStatus] = None,
) -> List[LeaveRequest]:
    q = db.query(LeaveRequest)
    if employee_id is not None:
        q = q.filter(LeaveRequest.employee_id == employee_id)
    if status_filter is not None:
        q = q.filter(LeaveRequest.status == status_filter)
    return q.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc()).all()


def _touches_ledger(leave: LeaveRequest) -> bool:
    return leave.leave_type in LEDGER_LEAVE_TYPES and Decimal(leave.days_paid or 0) > 0


def update_leave_status(
    db: Session,
    leave_id: int,
    new_status: LeaveStatus,
    approved_by: Optional[str] = None,
    comments: Optional[str] = None,
) -> LeaveRequest:
    """
    Move a request to new_status and keep the ledger in step.

    - non-approved -> approved: deduct days_paid.
    - approved -> anything else: restore days_paid.
    - no change in approval state: ledger untouched.
    The ledger mutation and status change commit together; on a storage error
    both are rolled back and the caller gets a 503.
    """
    leave = get_leave_request(db, leave_id)
    previous_status = leave.status
    year = leave.balance_year

    try:
        if _touches_ledger(leave) and previous_status != new_status:
            if new_status == LeaveStatus.APPROVED:
                wallet.get_or_create_balance(db, leave.employee_id, year)
                wallet.deduct_leave_days(
                    db, leave.employee_id, leave.days_paid, year,
                    leave_id=leave.id, action_by=approved_by, remarks=comments, commit=False,
                )
            elif previous_status == LeaveStatus.APPROVED:
                wallet.restore_leave_days(
                    db, leave.employee_id, leave.days_paid, year,
                    leave_id=leave.id, action_by=approved_by, remarks=comments, commit=False,
                )

        leave.status = new_status
        leave.approved_by = approved_by
        leave.comments = comments or ""
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error(
            "Leave request %s: ledger update failed moving %s -> %s; status unchanged",
            leave_id, previous_status.value, new_status.value, exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Leave balance update failed; status not changed",
        )

    db.refresh(leave)
    logger.info("Leave request %s: %s -> %s", leave_id, previous_status.value, new_status.value)
    return leave


def delete_leave_request(db: Session, leave_id: int, actor: Optional[str] = None) -> None:
    """Delete a request; an approved annual request gives its paid days back first."""
    leave = get_leave_request(db, leave_id)
    try:
        if leave.status == LeaveStatus.APPROVED and _touches_ledger(leave):
            wallet.restore_leave_days(
                db, leave.employee_id, leave.days_paid, leave.balance_year,
                leave_id=leave.id, action_by=actor, remarks="Leave request deleted", commit=False,
            )
            # audit row must exist before the FK is nulled by the delete
            db.flush()
        db.delete(leave)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error("Leave request %s: delete failed", leave_id, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Leave balance update failed; request not deleted",
        )
    logger.info("Leave request %s deleted by %s", leave_id, actor)
