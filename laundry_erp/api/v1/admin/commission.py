"""
Admin commission endpoints: rate table and per-employee breakdown.
"""
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from laundry_erp.core.deps import get_db, require_roles
from laundry_erp.models.employee import Employee, Role
from laundry_erp.schemas.commission import CommissionBreakdownOut, CommissionRateOut, CommissionRateUpdate
from laundry_erp.services import commission_service

router = APIRouter()


@router.get("/rates", response_model=List[CommissionRateOut])
async def get_rates(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.ADMIN)),
):
    return commission_service.list_rates(db)


@router.put("/rates/{process}", response_model=CommissionRateOut)
async def put_rate(
    process: str,
    request: CommissionRateUpdate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.ADMIN)),
):
    return commission_service.update_rate(db, process, request.rate_per_kg, actor_id=current_user.id)


@router.get("/{employee_id}", response_model=CommissionBreakdownOut)
async def get_breakdown(
    employee_id: int,
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000, le=2100),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.ADMIN)),
):
    """Commission per process for one employee over a local calendar month."""
    totals = commission_service.production_totals_for_period(db, employee_id, month, year)
    items = commission_service.commissions_for_period(totals, commission_service.rate_table(db))
    return CommissionBreakdownOut(
        employee_id=employee_id,
        month=month,
        year=year,
        items=items,
        total=commission_service.total_commission(items),
    )
