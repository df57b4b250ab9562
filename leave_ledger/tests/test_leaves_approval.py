"""
Tests for the leave request workflow: submit -> approve -> revoke/delete.

Ledger is charged only on the transition into APPROVED and given back only
on the transition out of it.
"""
from datetime import date
from decimal import Decimal

import pytest
from fastapi import status
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from leave_ledger.models.leave import LeaveBalance, LeaveRequest, LeaveStatus, LeaveTransaction
from leave_ledger.services import leave_wallet_service as wallet

EMPLOYEE_ID = 55
HR_HEADERS = {"X-User-Email": "hr@example.com"}


@pytest.fixture(autouse=True)
def june_first(freeze_today):
    return freeze_today(date(2026, 6, 1))


def _balance(db: Session) -> LeaveBalance:
    db.expire_all()
    return db.query(LeaveBalance).filter(
        LeaveBalance.employee_id == EMPLOYEE_ID, LeaveBalance.year == 2026
    ).one()


def _submit(client, start: str, end: str, leave_type: str = "annual") -> dict:
    response = client.post(
        "/api/v1/leaves",
        json={
            "employee_id": EMPLOYEE_ID,
            "employee_name": "Thandi Nkosi",
            "leave_type": leave_type,
            "start_date": start,
            "end_date": end,
            "reason": "Family visit",
        },
        headers={"X-User-Email": "thandi@example.com"},
    )
    assert response.status_code == status.HTTP_201_CREATED, response.json()
    return response.json()


def _set_status(client, leave_id: int, new_status: str, comments: str = None):
    return client.patch(
        f"/api/v1/leaves/{leave_id}",
        json={"status": new_status, "comments": comments},
        headers=HR_HEADERS,
    )


def test_submit_snapshots_split_without_touching_balance(client, db):
    data = _submit(client, "2026-06-08", "2026-06-12")

    assert data["status"] == "pending"
    assert data["days_requested"] == 5
    assert data["days_paid"] == 5
    assert data["days_unpaid"] == 0
    assert data["is_fully_paid"] is True
    assert data["created_by"] == "thandi@example.com"
    assert _balance(db).days_used == Decimal("0.00")


def test_submit_over_balance_is_partially_paid(client, db):
    data = _submit(client, "2026-06-01", "2026-06-10")

    assert data["days_requested"] == 10
    assert data["days_paid"] == 7.52
    assert data["days_unpaid"] == 2.48
    assert data["is_fully_paid"] is False


def test_approve_deducts_paid_days_once(client, db):
    leave_id = _submit(client, "2026-06-08", "2026-06-12")["id"]

    response = _set_status(client, leave_id, "approved", "Enjoy")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "approved"
    assert response.json()["approved_by"] == "hr@example.com"
    assert _balance(db).days_used == Decimal("5.00")

    # approved -> approved does not charge again
    assert _set_status(client, leave_id, "approved").status_code == status.HTTP_200_OK
    assert _balance(db).days_used == Decimal("5.00")
    assert db.query(LeaveTransaction).count() == 1


def test_revoking_approval_restores_paid_days(client, db):
    leave_id = _submit(client, "2026-06-08", "2026-06-12")["id"]
    _set_status(client, leave_id, "approved")

    response = _set_status(client, leave_id, "cancelled", "Project deadline")

    assert response.status_code == status.HTTP_200_OK
    bal = _balance(db)
    assert bal.days_used == Decimal("0.00")
    assert bal.days_remaining == Decimal("7.52")
    txns = wallet.get_transactions(db, EMPLOYEE_ID, 2026)
    assert {t.action for t in txns} == {"APPROVE_DEDUCT", "REVOKE_RESTORE"}
    assert all(t.leave_id == leave_id for t in txns)


def test_reapproval_after_revocation_deducts_again(client, db):
    leave_id = _submit(client, "2026-06-08", "2026-06-12")["id"]
    _set_status(client, leave_id, "approved")
    _set_status(client, leave_id, "pending")
    _set_status(client, leave_id, "approved")

    assert _balance(db).days_used == Decimal("5.00")


def test_rejecting_pending_request_leaves_balance_alone(client, db):
    leave_id = _submit(client, "2026-06-08", "2026-06-12")["id"]

    response = _set_status(client, leave_id, "rejected", "Short staffed")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["comments"] == "Short staffed"
    assert _balance(db).days_used == Decimal("0.00")
    assert db.query(LeaveTransaction).count() == 0


def test_partial_request_approval_deducts_only_paid_portion(client, db):
    leave_id = _submit(client, "2026-06-01", "2026-06-10")["id"]

    _set_status(client, leave_id, "approved")

    bal = _balance(db)
    assert bal.days_used == Decimal("7.52")
    assert bal.days_remaining == Decimal("0.00")


def test_approval_uses_submission_snapshot(client, db):
    """Both requests were sized against 7.52 days; each approval charges its own snapshot."""
    first = _submit(client, "2026-06-08", "2026-06-12")
    second = _submit(client, "2026-06-15", "2026-06-19")
    assert first["days_paid"] == 5
    assert second["days_paid"] == 5

    _set_status(client, first["id"], "approved")
    _set_status(client, second["id"], "approved")

    bal = _balance(db)
    assert bal.days_used == Decimal("10.00")
    assert bal.days_remaining == Decimal("-2.48")


def test_non_annual_approval_does_not_touch_ledger(client, db):
    leave_id = _submit(client, "2026-06-08", "2026-06-12", leave_type="sick")["id"]

    assert _set_status(client, leave_id, "approved").status_code == status.HTTP_200_OK

    assert db.query(LeaveBalance).count() == 0
    assert db.query(LeaveTransaction).count() == 0


def test_ledger_failure_fails_the_approval(client, db, monkeypatch):
    leave_id = _submit(client, "2026-06-08", "2026-06-12")["id"]

    def storage_down(*args, **kwargs):
        raise OperationalError("UPDATE leave_balances", {}, Exception("connection refused"))

    monkeypatch.setattr(wallet, "deduct_leave_days", storage_down)

    response = _set_status(client, leave_id, "approved")

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    db.expire_all()
    assert db.get(LeaveRequest, leave_id).status == LeaveStatus.PENDING
    assert _balance(db).days_used == Decimal("0.00")


def test_deleting_approved_request_restores_balance(client, db):
    leave_id = _submit(client, "2026-06-08", "2026-06-12")["id"]
    _set_status(client, leave_id, "approved")

    response = client.delete(f"/api/v1/leaves/{leave_id}", headers=HR_HEADERS)

    assert response.status_code == status.HTTP_200_OK
    assert _balance(db).days_used == Decimal("0.00")
    assert client.get(f"/api/v1/leaves/{leave_id}").status_code == status.HTTP_404_NOT_FOUND


def test_list_and_filter_requests(client, db):
    first = _submit(client, "2026-06-08", "2026-06-12")
    _submit(client, "2026-07-06", "2026-07-07", leave_type="study")
    _set_status(client, first["id"], "approved")

    everything = client.get("/api/v1/leaves", params={"employee_id": EMPLOYEE_ID}).json()
    approved = client.get("/api/v1/leaves", params={"status": "approved"}).json()

    assert everything["total"] == 2
    assert approved["total"] == 1
    assert approved["items"][0]["id"] == first["id"]


def test_unknown_request_returns_404(client):
    response = _set_status(client, 9999, "approved")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Leave request not found"


def test_reversed_dates_rejected(client):
    response = client.post(
        "/api/v1/leaves",
        json={
            "employee_id": EMPLOYEE_ID,
            "leave_type": "annual",
            "start_date": "2026-06-12",
            "end_date": "2026-06-08",
        },
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
