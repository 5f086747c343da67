"""
Admin cash advance (kasbon) endpoints: list, add, delete.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from laundry_erp.core.deps import get_db, require_roles
from laundry_erp.models.employee import Employee, Role
from laundry_erp.schemas.cash_advance import CashAdvanceCreate, CashAdvanceOut
from laundry_erp.services import cash_advance_service

router = APIRouter()


def _to_out(advance) -> CashAdvanceOut:
    out = CashAdvanceOut.model_validate(advance)
    out.employee_name = advance.employee.name if advance.employee else None
    return out


@router.get("", response_model=List[CashAdvanceOut])
async def list_kasbon(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    employee_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.ADMIN)),
):
    advances = cash_advance_service.list_cash_advances(db, month=month, year=year, employee_id=employee_id)
    return [_to_out(advance) for advance in advances]


@router.post("", response_model=CashAdvanceOut, status_code=status.HTTP_201_CREATED)
async def add_kasbon(
    request: CashAdvanceCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.ADMIN)),
):
    """Record a cash advance; it is deducted from the payroll draft of its local month."""
    advance = cash_advance_service.add_cash_advance(
        db, request.employee_id, request.amount, actor_id=current_user.id, note=request.note
    )
    return _to_out(advance)


@router.delete("/{advance_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_kasbon(
    advance_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.ADMIN)),
):
    cash_advance_service.delete_cash_advance(db, advance_id, actor_id=current_user.id)
