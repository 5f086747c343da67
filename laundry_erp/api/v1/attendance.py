"""
Attendance endpoints: clock in/out for production staff and their own history.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from laundry_erp.core.deps import get_db, get_current_user, require_roles
from laundry_erp.models.employee import Employee, Role
from laundry_erp.schemas.attendance import AttendanceOut, ClockRequest
from laundry_erp.services.attendance_service import list_attendance, record_clock_event

router = APIRouter()


@router.post("", response_model=AttendanceOut, status_code=status.HTTP_201_CREATED)
async def clock(
    request: ClockRequest,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.PRODUKSI)),
):
    """
    Record a clock-in or clock-out at server time

    - **type**: "in" or "out"
    - **shift**: "pagi" or "sore" on clock-in; decides lateness
    - **lat** / **lng**: optional GPS position
    """
    return record_clock_event(
        db=db,
        employee_id=current_user.id,
        type=request.type,
        shift=request.shift,
        lat=request.lat,
        lng=request.lng,
    )


@router.get("/my", response_model=List[AttendanceOut])
async def my_attendance(
    date: Optional[str] = Query(None, description="Local date YYYY-MM-DD"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Own attendance records, newest first; annulled ones included with their status."""
    return list_attendance(db, local_date=date, employee_id=current_user.id)
