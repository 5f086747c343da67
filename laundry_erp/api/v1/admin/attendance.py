"""
Admin attendance endpoints: list by local date, annul a record.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from laundry_erp.core.deps import get_db, get_current_user, require_roles
from laundry_erp.models.employee import Employee, Role
from laundry_erp.schemas.attendance import AnnulRequest, AnnulResponse, AttendanceOut
from laundry_erp.services.annulment_service import annul_attendance
from laundry_erp.services.attendance_service import list_attendance

router = APIRouter()


@router.get("", response_model=List[AttendanceOut])
async def list_all(
    date: Optional[str] = Query(None, description="Local date YYYY-MM-DD"),
    employee_id: Optional[int] = Query(None),
    include_annulled: bool = Query(True),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.ADMIN)),
):
    return list_attendance(db, local_date=date, employee_id=employee_id, include_annulled=include_annulled)


@router.post("/annul", response_model=AnnulResponse)
async def annul(
    request: AnnulRequest,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """
    Annul an attendance record

    The record stays in place with status "annulled" and no longer counts
    toward attendance days, lateness or overtime. Role and state checks are
    done by the annulment service (403 / 409).
    """
    row = annul_attendance(db, request.attendance_id, current_user, request.reason)
    return AnnulResponse(
        success=True,
        message="Attendance record annulled",
        attendance=AttendanceOut.model_validate(row),
    )
