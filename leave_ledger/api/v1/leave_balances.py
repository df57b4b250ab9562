"""
Annual leave balance endpoints
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from leave_ledger.core.deps import get_db, get_calendar, get_acting_user
from leave_ledger.schemas.leave import (
    BalanceOut,
    BalanceSummaryOut,
    LedgerAdjustRequest,
    SplitOut,
    SplitRequest,
    TransactionOut,
)
from leave_ledger.services.holiday_calendar import HolidayCalendar
from leave_ledger.services import leave_wallet_service as wallet
from leave_ledger.services.leave_service import split_request_days

router = APIRouter()


@router.get("/{employee_id}", response_model=BalanceSummaryOut)
async def get_balance_summary_endpoint(
    employee_id: int,
    year: Optional[int] = Query(None, description="Calendar year (defaults to the current year)"),
    db: Session = Depends(get_db),
):
    """
    Balance summary for a widget.

    Always 200: when storage fails the default balance is returned with 'error' set.
    """
    return wallet.get_balance_summary(db, employee_id, year)


@router.post("/{employee_id}/split", response_model=SplitOut)
async def split_request_days_endpoint(
    employee_id: int,
    body: SplitRequest,
    db: Session = Depends(get_db),
    calendar: HolidayCalendar = Depends(get_calendar),
):
    """Preview how many days of a prospective request would be paid"""
    return split_request_days(
        db, employee_id, body.leave_type, body.start_date, body.end_date, calendar=calendar
    )


@router.post("/{employee_id}/apply-approval", response_model=BalanceOut)
async def apply_approval_endpoint(
    employee_id: int,
    body: LedgerAdjustRequest,
    db: Session = Depends(get_db),
    actor: str = Depends(get_acting_user),
):
    """Charge approved paid days to the ledger"""
    bal = wallet.deduct_leave_days(db, employee_id, body.days_paid, body.year, action_by=actor)
    if bal is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No leave balance for employee {employee_id} in {body.year}",
        )
    return bal


@router.post("/{employee_id}/revoke-approval", response_model=BalanceOut)
async def revoke_approval_endpoint(
    employee_id: int,
    body: LedgerAdjustRequest,
    db: Session = Depends(get_db),
    actor: str = Depends(get_acting_user),
):
    """Give back paid days after an approval is withdrawn"""
    bal = wallet.restore_leave_days(db, employee_id, body.days_paid, body.year, action_by=actor)
    if bal is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No leave balance for employee {employee_id} in {body.year}",
        )
    return bal


@router.get("/{employee_id}/transactions", response_model=List[TransactionOut])
async def list_transactions_endpoint(
    employee_id: int,
    year: Optional[int] = Query(None, description="Filter by year"),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """Ledger audit trail, newest first"""
    return wallet.get_transactions(db, employee_id, year=year, limit=limit)
