"""
Leave request endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from leave_ledger.core.deps import get_db, get_calendar, get_acting_user
from leave_ledger.models.leave import LeaveStatus
from leave_ledger.schemas.leave import (
    LeaveCreateRequest,
    LeaveListResponse,
    LeaveOut,
    LeaveStatusUpdate,
)
from leave_ledger.services.holiday_calendar import HolidayCalendar
from leave_ledger.services.leave_service import (
    create_leave_request,
    delete_leave_request,
    get_leave_request,
    list_leave_requests,
    update_leave_status,
)

router = APIRouter()


@router.post("", response_model=LeaveOut, status_code=201)
async def create_leave_endpoint(
    body: LeaveCreateRequest,
    db: Session = Depends(get_db),
    calendar: HolidayCalendar = Depends(get_calendar),
    actor: str = Depends(get_acting_user),
):
    """Submit a leave request; the paid/unpaid split is fixed now"""
    return create_leave_request(
        db,
        employee_id=body.employee_id,
        leave_type=body.leave_type,
        start_date=body.start_date,
        end_date=body.end_date,
        reason=body.reason,
        employee_name=body.employee_name,
        created_by=actor,
        calendar=calendar,
    )


@router.get("", response_model=LeaveListResponse)
async def list_leaves_endpoint(
    employee_id: Optional[int] = Query(None, description="Filter by employee"),
    status: Optional[LeaveStatus] = Query(None, description="Filter by status"),
    db: Session = Depends(get_db),
):
    items = list_leave_requests(db, employee_id=employee_id, status_filter=status)
    return {"items": items, "total": len(items)}


@router.get("/{leave_id}", response_model=LeaveOut)
async def get_leave_endpoint(leave_id: int, db: Session = Depends(get_db)):
    return get_leave_request(db, leave_id)


@router.patch("/{leave_id}", response_model=LeaveOut)
async def update_leave_status_endpoint(
    leave_id: int,
    body: LeaveStatusUpdate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_acting_user),
):
    """
    Change status. Approving deducts the request's paid days; moving an
    approved request to any other status restores them.
    """
    return update_leave_status(db, leave_id, body.status, approved_by=actor, comments=body.comments)


@router.delete("/{leave_id}")
async def delete_leave_endpoint(
    leave_id: int,
    db: Session = Depends(get_db),
    actor: str = Depends(get_acting_user),
):
    delete_leave_request(db, leave_id, actor=actor)
    return {"message": "Leave request deleted successfully"}
