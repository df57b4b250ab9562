"""
Tests for the annual leave ledger (create / refresh / deduct / restore)
"""
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from leave_ledger.models.leave import LeaveBalance, LeaveTransaction, LeaveTransactionAction
from leave_ledger.services import leave_wallet_service as wallet

JUNE_1 = date(2026, 6, 1)
EMPLOYEE_ID = 101


@pytest.fixture(autouse=True)
def june_first(freeze_today):
    return freeze_today(JUNE_1)


def _row_count(db: Session, employee_id: int, year: int) -> int:
    return db.query(LeaveBalance).filter(
        LeaveBalance.employee_id == employee_id, LeaveBalance.year == year
    ).count()


def test_get_or_create_creates_row_with_accrual_to_date(db):
    bal = wallet.get_or_create_balance(db, EMPLOYEE_ID, 2026, as_of_date=JUNE_1)

    assert bal.total_days_allocated == Decimal("18.00")
    assert bal.days_used == Decimal("0.00")
    assert bal.days_remaining == Decimal("7.52")
    assert bal.last_accrual_date == JUNE_1


def test_get_or_create_is_idempotent(db):
    first = wallet.get_or_create_balance(db, EMPLOYEE_ID, 2026, as_of_date=JUNE_1)
    second = wallet.get_or_create_balance(db, EMPLOYEE_ID, 2026, as_of_date=date(2026, 9, 1))

    assert first.id == second.id
    assert _row_count(db, EMPLOYEE_ID, 2026) == 1


def test_get_or_create_reuses_row_created_concurrently(db, monkeypatch):
    """Another writer inserts between our read and our insert: one row survives."""
    db.add(LeaveBalance(
        employee_id=EMPLOYEE_ID, year=2026, total_days_allocated=Decimal("18.00"),
        days_used=Decimal("2.00"), days_remaining=Decimal("5.52"), last_accrual_date=JUNE_1,
    ))
    db.commit()

    real_lookup = wallet._get_balance_row
    calls = []

    def lookup_missing_first(session, employee_id, year):
        calls.append(year)
        if len(calls) == 1:
            return None
        return real_lookup(session, employee_id, year)

    monkeypatch.setattr(wallet, "_get_balance_row", lookup_missing_first)

    bal = wallet.get_or_create_balance(db, EMPLOYEE_ID, 2026, as_of_date=JUNE_1)

    assert bal.days_used == Decimal("2.00")
    assert _row_count(db, EMPLOYEE_ID, 2026) == 1


def test_rows_are_partitioned_by_year(db):
    wallet.get_or_create_balance(db, EMPLOYEE_ID, 2026, as_of_date=JUNE_1)
    wallet.deduct_leave_days(db, EMPLOYEE_ID, Decimal("3"), 2026)

    next_year = wallet.get_or_create_balance(db, EMPLOYEE_ID, 2027, as_of_date=date(2027, 1, 5))

    assert next_year.days_used == Decimal("0.00")
    assert next_year.days_remaining == Decimal("1.50")


def test_refresh_accrual_reconciles_remaining(db):
    january = date(2026, 1, 10)
    wallet.get_or_create_balance(db, EMPLOYEE_ID, 2026, as_of_date=january)
    stale = wallet.deduct_leave_days(db, EMPLOYEE_ID, Decimal("1"), 2026, as_of_date=january)
    assert stale.days_remaining == Decimal("0.50")

    bal = wallet.refresh_accrual(db, EMPLOYEE_ID, 2026, as_of_date=JUNE_1)

    assert bal.days_used == Decimal("1.00")
    assert bal.days_remaining == Decimal("6.52")
    assert bal.last_accrual_date == JUNE_1


def test_refresh_accrual_creates_missing_row(db):
    bal = wallet.refresh_accrual(db, EMPLOYEE_ID, 2026, as_of_date=JUNE_1)

    assert bal.days_remaining == Decimal("7.52")
    assert _row_count(db, EMPLOYEE_ID, 2026) == 1


def test_deduct_increments_used_and_logs_transaction(db):
    wallet.get_or_create_balance(db, EMPLOYEE_ID, 2026, as_of_date=JUNE_1)

    bal = wallet.deduct_leave_days(db, EMPLOYEE_ID, Decimal("3"), 2026, action_by="hr@example.com")

    assert bal.days_used == Decimal("3.00")
    assert bal.days_remaining == Decimal("4.52")
    txn = db.query(LeaveTransaction).one()
    assert txn.delta_days == Decimal("-3.00")
    assert txn.action == LeaveTransactionAction.APPROVE_DEDUCT.value
    assert txn.action_by == "hr@example.com"


def test_successive_deducts_accumulate(db):
    wallet.get_or_create_balance(db, EMPLOYEE_ID, 2026, as_of_date=JUNE_1)

    wallet.deduct_leave_days(db, EMPLOYEE_ID, Decimal("2"), 2026)
    bal = wallet.deduct_leave_days(db, EMPLOYEE_ID, Decimal("1.5"), 2026)

    assert bal.days_used == Decimal("3.50")
    assert bal.days_remaining == Decimal("4.02")


def test_deduct_allows_overdraft(db):
    wallet.get_or_create_balance(db, EMPLOYEE_ID, 2026, as_of_date=date(2026, 1, 10))

    bal = wallet.deduct_leave_days(db, EMPLOYEE_ID, Decimal("10"), 2026)

    # 7.52 accrued by June 1, not the 1.50 stored in January
    assert bal.days_remaining == Decimal("-2.48")


def test_deduct_reconciles_remaining_against_todays_accrual(db):
    wallet.get_or_create_balance(db, EMPLOYEE_ID, 2026, as_of_date=date(2026, 1, 10))

    bal = wallet.deduct_leave_days(db, EMPLOYEE_ID, Decimal("5"), 2026)

    assert bal.days_used == Decimal("5.00")
    assert bal.days_remaining == Decimal("2.52")
    assert bal.last_accrual_date == JUNE_1


def test_restore_reconciles_remaining_against_todays_accrual(db):
    january = date(2026, 1, 10)
    wallet.get_or_create_balance(db, EMPLOYEE_ID, 2026, as_of_date=january)
    wallet.deduct_leave_days(db, EMPLOYEE_ID, Decimal("3"), 2026, as_of_date=january)

    bal = wallet.restore_leave_days(db, EMPLOYEE_ID, Decimal("3"), 2026)

    assert bal.days_used == Decimal("0.00")
    assert bal.days_remaining == Decimal("7.52")
    assert bal.last_accrual_date == JUNE_1


def test_deduct_and_restore_without_row_are_noops(db):
    assert wallet.deduct_leave_days(db, EMPLOYEE_ID, Decimal("3"), 2026) is None
    assert wallet.restore_leave_days(db, EMPLOYEE_ID, Decimal("3"), 2026) is None
    assert db.query(LeaveTransaction).count() == 0
    assert _row_count(db, EMPLOYEE_ID, 2026) == 0


def test_deduct_then_restore_round_trips(db):
    before = wallet.get_or_create_balance(db, EMPLOYEE_ID, 2026, as_of_date=JUNE_1)
    used_before, remaining_before = before.days_used, before.days_remaining

    wallet.deduct_leave_days(db, EMPLOYEE_ID, Decimal("3"), 2026)
    after = wallet.restore_leave_days(db, EMPLOYEE_ID, Decimal("3"), 2026)

    assert after.days_used == used_before
    assert after.days_remaining == remaining_before
    actions = [t.action for t in wallet.get_transactions(db, EMPLOYEE_ID, 2026)]
    assert sorted(actions) == ["APPROVE_DEDUCT", "REVOKE_RESTORE"]


def test_restore_floors_used_at_zero(db):
    wallet.get_or_create_balance(db, EMPLOYEE_ID, 2026, as_of_date=JUNE_1)
    wallet.deduct_leave_days(db, EMPLOYEE_ID, Decimal("1"), 2026)

    bal = wallet.restore_leave_days(db, EMPLOYEE_ID, Decimal("3"), 2026)

    assert bal.days_used == Decimal("0.00")
    assert bal.days_remaining == Decimal("7.52")


@pytest.mark.parametrize("as_of, expected", [
    (date(2026, 1, 20), 1.5),
    (JUNE_1, 7.52),
    (date(2026, 12, 31), 18.0),
])
def test_balance_summary_recomputes_from_curve(db, as_of, expected):
    wallet.get_or_create_balance(db, EMPLOYEE_ID, 2026, as_of_date=date(2026, 1, 2))

    summary = wallet.get_balance_summary(db, EMPLOYEE_ID, 2026, as_of_date=as_of)

    assert summary["accrued_to_date"] == expected
    assert summary["days_remaining"] == expected
    assert summary["total_allocated"] == 18.0
    assert summary["last_accrual_date"] == as_of.isoformat()
    assert "error" not in summary


def test_balance_summary_degrades_on_storage_failure(db, monkeypatch):
    from sqlalchemy.exc import OperationalError

    def storage_down(*args, **kwargs):
        raise OperationalError("UPDATE leave_balances", {}, Exception("connection refused"))

    monkeypatch.setattr(wallet, "refresh_accrual", storage_down)

    summary = wallet.get_balance_summary(db, EMPLOYEE_ID, 2026, as_of_date=JUNE_1)

    assert summary["error"]
    assert summary["total_allocated"] == 18.0
    assert summary["accrued_to_date"] == 0
    assert summary["days_used"] == 0
    assert summary["days_remaining"] == 0


def test_deduct_propagates_storage_failure(db, monkeypatch):
    from sqlalchemy.exc import OperationalError

    wallet.get_or_create_balance(db, EMPLOYEE_ID, 2026, as_of_date=JUNE_1)

    def storage_down(*args, **kwargs):
        raise OperationalError("UPDATE leave_balances", {}, Exception("connection refused"))

    monkeypatch.setattr(wallet, "_apply_delta", storage_down)

    with pytest.raises(OperationalError):
        wallet.deduct_leave_days(db, EMPLOYEE_ID, Decimal("1"), 2026)
