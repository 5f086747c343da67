"""
Admin payroll endpoints: computed draft, save (create or overwrite), list.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from laundry_erp.core.deps import get_db, require_roles
from laundry_erp.models.employee import Employee, Role
from laundry_erp.schemas.payroll import PayrollDraftOut, PayrollFields, PayrollRecordOut, PayrollSaveRequest
from laundry_erp.services import payroll_service

router = APIRouter()


@router.get("", response_model=List[PayrollRecordOut])
async def list_payroll(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000, le=2100),
    employee_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.ADMIN)),
):
    return payroll_service.list_payroll(db, month, year, employee_id=employee_id)


@router.get("/draft/{employee_id}", response_model=PayrollDraftOut)
async def get_draft(
    employee_id: int,
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000, le=2100),
    base_salary: Optional[int] = Query(None, ge=0, description="Defaults to the employee's base salary"),
    holiday_overtime_hours: float = Query(0, ge=0),
    holiday_overtime_rate: Optional[int] = Query(None, ge=0),
    holiday_bonus: int = Query(0, ge=0),
    other_penalty: int = Query(0, ge=0),
    cash_advance: Optional[int] = Query(None, ge=0, description="Defaults to the kasbon ledger total of the month"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.ADMIN)),
):
    """
    Compute a payroll proposal from attendance, tenure and production

    Manual figures (holiday overtime, THR, penalties, kasbon) are passed as
    query parameters and folded into the totals.
    """
    return payroll_service.build_payroll_draft(
        db,
        employee_id,
        month,
        year,
        base_salary=base_salary,
        holiday_overtime_hours=holiday_overtime_hours,
        holiday_overtime_rate=holiday_overtime_rate,
        holiday_bonus=holiday_bonus,
        other_penalty=other_penalty,
        cash_advance=cash_advance,
    )


@router.post("", response_model=PayrollRecordOut)
async def save_payroll(
    request: PayrollSaveRequest,
    response: Response,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.ADMIN)),
):
    """Save the payroll of (employee, month, year). 201 when created, 200 when overwritten."""
    fields = PayrollFields(**request.model_dump(include=set(PayrollFields.model_fields)))
    row, created = payroll_service.save_payroll(
        db, request.employee_id, request.month, request.year, fields, actor_id=current_user.id
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return payroll_service.to_record_out(row)
