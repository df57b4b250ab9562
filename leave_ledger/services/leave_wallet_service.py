"""
Leave Wallet Service - annual leave ledger, one row per (employee_id, year).

- Row created lazily with used=0 and remaining=accrued_to_date(today).
- Refresh: remaining = accrued_to_date(today) - used.
- Deduct (on approval): used += days, remaining = accrued_to_date(today) - used.
- Restore (on revocation): used = max(0, used - days), remaining = accrued_to_date(today) - used.
Mutations are issued as SQL deltas against the current column values so two
concurrent approvals for the same employee-year cannot lose an update.
No carry-over: every calendar year starts from a fresh row.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import case, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from leave_ledger.core.config import settings
from leave_ledger.core.constants import DEGRADED_BALANCE_MARKER, ZERO_DAYS
from leave_ledger.models.leave import LeaveBalance, LeaveTransaction, LeaveTransactionAction
from leave_ledger.services.accrual_service import calculate_accrued_days, round_days
from leave_ledger.utils.datetime_utils import now_utc, resolve_as_of

logger = logging.getLogger(__name__)


def _get_balance_row(db: Session, employee_id: int, year: int) -> Optional[LeaveBalance]:
    return (
        db.query(LeaveBalance)
        .filter(LeaveBalance.employee_id == employee_id, LeaveBalance.year == year)
        .populate_existing()
        .first()
    )


def get_or_create_balance(
    db: Session,
    employee_id: int,
    year: int,
    as_of_date: Optional[date] = None,
) -> LeaveBalance:
    """
    Return the (employee_id, year) row, inserting it if absent.

    The insert runs in a SAVEPOINT; if a concurrent caller created the row
    first the unique constraint fires and the winner's row is returned.
    """
    bal = _get_balance_row(db, employee_id, year)
    if bal:
        return bal

    as_of = resolve_as_of(as_of_date)
    accrued = calculate_accrued_days(as_of)
    try:
        with db.begin_nested():
            bal = LeaveBalance(
                employee_id=employee_id,
                year=year,
                total_days_allocated=round_days(settings.ANNUAL_LEAVE_DAYS),
                days_used=ZERO_DAYS,
                days_remaining=accrued,
                last_accrual_date=as_of,
            )
            db.add(bal)
        db.commit()
        logger.info(
            "Created leave balance employee_id=%s year=%s accrued=%s", employee_id, year, accrued
        )
    except IntegrityError:
        logger.info("Leave balance employee_id=%s year=%s created concurrently; reusing", employee_id, year)
        db.commit()
        bal = _get_balance_row(db, employee_id, year)
    return bal


def refresh_accrual(
    db: Session,
    employee_id: int,
    year: int,
    as_of_date: Optional[date] = None,
) -> LeaveBalance:
    """Reconcile days_remaining to accrued_to_date - days_used and stamp last_accrual_date."""
    as_of = resolve_as_of(as_of_date)
    accrued = calculate_accrued_days(as_of)

    result = db.execute(
        update(LeaveBalance)
        .where(LeaveBalance.employee_id == employee_id, LeaveBalance.year == year)
        .values(
            days_remaining=accrued - LeaveBalance.days_used,
            last_accrual_date=as_of,
            updated_at=now_utc(),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        return get_or_create_balance(db, employee_id, year, as_of_date=as_of)

    db.commit()
    return _get_balance_row(db, employee_id, year)


def _apply_delta(db: Session, employee_id: int, year: int, values: Dict[str, Any]) -> Optional[LeaveBalance]:
    result = db.execute(
        update(LeaveBalance)
        .where(LeaveBalance.employee_id == employee_id, LeaveBalance.year == year)
        .values(updated_at=now_utc(), **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        return None
    db.flush()
    return _get_balance_row(db, employee_id, year)


def _log_transaction(
    db: Session,
    employee_id: int,
    leave_id: Optional[int],
    year: int,
    delta_days: Decimal,
    action: str,
    remarks: Optional[str],
    action_by: Optional[str],
) -> None:
    t = LeaveTransaction(
        employee_id=employee_id,
        leave_id=leave_id,
        year=year,
        delta_days=delta_days,
        action=action,
        remarks=remarks,
        action_by=action_by,
        action_at=now_utc(),
    )
    db.add(t)


def deduct_leave_days(
    db: Session,
    employee_id: int,
    days: Decimal,
    year: int,
    leave_id: Optional[int] = None,
    action_by: Optional[str] = None,
    remarks: Optional[str] = None,
    commit: bool = True,
    as_of_date: Optional[date] = None,
) -> Optional[LeaveBalance]:
    """
    Charge approved paid days to the ledger.

    days_remaining is reconciled against today's accrual in the same UPDATE.
    No floor on days_remaining: a negative value signals an overdraft.
    Returns None (no-op) when the row does not exist.
    Storage errors propagate to the caller.
    """
    days = round_days(days)
    as_of = resolve_as_of(as_of_date)
    accrued = calculate_accrued_days(as_of)
    days_used = LeaveBalance.days_used + days
    bal = _apply_delta(db, employee_id, year, {
        "days_used": days_used,
        "days_remaining": accrued - days_used,
        "last_accrual_date": as_of,
    })
    if bal is None:
        logger.warning("Deduct skipped: no leave balance for employee_id=%s year=%s", employee_id, year)
        return None

    _log_transaction(
        db, employee_id, leave_id, year, -days,
        LeaveTransactionAction.APPROVE_DEDUCT.value, remarks, action_by,
    )
    if commit:
        db.commit()
        db.refresh(bal)
    logger.info(
        "Deducted %s days employee_id=%s year=%s used=%s remaining=%s",
        days, employee_id, year, bal.days_used, bal.days_remaining,
    )
    return bal


def restore_leave_days(
    db: Session,
    employee_id: int,
    days: Decimal,
    year: int,
    leave_id: Optional[int] = None,
    action_by: Optional[str] = None,
    remarks: Optional[str] = None,
    commit: bool = True,
    as_of_date: Optional[date] = None,
) -> Optional[LeaveBalance]:
    """
    Give previously charged days back after an approval is revoked.

    days_used is floored at 0 and days_remaining reconciled against today's
    accrual. Returns None (no-op) when the row does not exist.
    """
    days = round_days(days)
    as_of = resolve_as_of(as_of_date)
    accrued = calculate_accrued_days(as_of)
    days_used = case(
        (LeaveBalance.days_used - days < 0, ZERO_DAYS),
        else_=LeaveBalance.days_used - days,
    )
    bal = _apply_delta(db, employee_id, year, {
        "days_used": days_used,
        "days_remaining": accrued - days_used,
        "last_accrual_date": as_of,
    })
    if bal is None:
        logger.warning("Restore skipped: no leave balance for employee_id=%s year=%s", employee_id, year)
        return None

    _log_transaction(
        db, employee_id, leave_id, year, days,
        LeaveTransactionAction.REVOKE_RESTORE.value, remarks, action_by,
    )
    if commit:
        db.commit()
        db.refresh(bal)
    logger.info(
        "Restored %s days employee_id=%s year=%s used=%s remaining=%s",
        days, employee_id, year, bal.days_used, bal.days_remaining,
    )
    return bal


def get_balance_summary(
    db: Session,
    employee_id: int,
    year: Optional[int] = None,
    as_of_date: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Read model for balance widgets.

    Never raises: on any failure the default balance is returned with an
    'error' marker so the UI can still render.
    """
    as_of = resolve_as_of(as_of_date)
    year = year or as_of.year
    try:
        bal = refresh_accrual(db, employee_id, year, as_of_date=as_of)
        accrued = calculate_accrued_days(as_of)
        days_used = Decimal(bal.days_used or 0)
        return {
            "employee_id": employee_id,
            "year": year,
            "total_allocated": float(bal.total_days_allocated or settings.ANNUAL_LEAVE_DAYS),
            "accrued_to_date": float(accrued),
            "days_used": float(days_used),
            "days_remaining": float(round_days(accrued - days_used)),
            "last_accrual_date": (bal.last_accrual_date or as_of).isoformat(),
        }
    except Exception:
        logger.exception("Error getting leave balance summary employee_id=%s year=%s", employee_id, year)
        db.rollback()
        return {
            "employee_id": employee_id,
            "year": year,
            "total_allocated": float(settings.ANNUAL_LEAVE_DAYS),
            "accrued_to_date": 0.0,
            "days_used": 0.0,
            "days_remaining": 0.0,
            "last_accrual_date": as_of.isoformat(),
            "error": DEGRADED_BALANCE_MARKER,
        }


def get_transactions(
    db: Session,
    employee_id: int,
    year: Optional[int] = None,
    limit: int = 100,
) -> List[LeaveTransaction]:
    q = db.query(LeaveTransaction).filter(LeaveTransaction.employee_id == employee_id)
    if year is not None:
        q = q.filter(LeaveTransaction.year == year)
    return q.order_by(LeaveTransaction.action_at.desc(), LeaveTransaction.id.desc()).limit(limit).all()
