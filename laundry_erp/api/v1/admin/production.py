"""
Admin production audit endpoints: month list, edit with history, nota verification.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from laundry_erp.core.deps import get_db, require_roles
from laundry_erp.models.employee import Employee, Role
from laundry_erp.schemas.production import (
    ProductionEditResponse,
    ProductionHistoryOut,
    ProductionOut,
    ProductionUpdate,
    VerifyRequest,
    VerifyResponse,
)
from laundry_erp.services import production_service

router = APIRouter()


@router.get("", response_model=List[ProductionOut])
async def list_month(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2000, le=2100),
    employee_id: Optional[int] = Query(None),
    verified: Optional[bool] = Query(None, description="true: verified only, false: unverified only"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.ADMIN)),
):
    return production_service.list_production(db, month, year, employee_id=employee_id, verified=verified)


@router.put("/{production_id}", response_model=ProductionEditResponse)
async def edit(
    production_id: int,
    request: ProductionUpdate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.ADMIN)),
):
    """
    Correct a production step

    Every changed field is written to the edit history. Commission drafts
    computed afterwards use the corrected weight.
    """
    entry, changes_count = production_service.update_production(db, production_id, request, current_user)
    return ProductionEditResponse(
        message="Production entry updated",
        changes_count=changes_count,
        item=ProductionOut.model_validate(entry),
    )


@router.get("/history/{production_id}", response_model=List[ProductionHistoryOut])
async def history(
    production_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.ADMIN)),
):
    rows = production_service.production_history(db, production_id)
    result = []
    for row in rows:
        out = ProductionHistoryOut.model_validate(row)
        out.admin_name = row.admin.name if row.admin else None
        result.append(out)
    return result


@router.post("/verify", response_model=VerifyResponse)
async def verify(
    request: VerifyRequest,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.ADMIN)),
):
    count = production_service.set_verification(db, request.nota_number, True, current_user)
    return VerifyResponse(
        message="Nota verified",
        nota_number=request.nota_number.strip(),
        verified_status="verified",
        count=count,
    )


@router.post("/unverify", response_model=VerifyResponse)
async def unverify(
    request: VerifyRequest,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.ADMIN)),
):
    count = production_service.set_verification(db, request.nota_number, False, current_user)
    return VerifyResponse(
        message="Nota verification removed",
        nota_number=request.nota_number.strip(),
        verified_status="unverified",
        count=count,
    )
