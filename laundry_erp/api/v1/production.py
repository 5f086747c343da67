"""
Production intake endpoints (produksi and kurir)
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from laundry_erp.core.deps import get_db, require_roles
from laundry_erp.models.employee import Employee, Role
from laundry_erp.schemas.production import ProductionCreate, ProductionOut, ProductionSearchResponse
from laundry_erp.services.production_service import create_production, search_by_nota

router = APIRouter()


@router.post("", response_model=ProductionOut, status_code=status.HTTP_201_CREATED)
async def create(
    request: ProductionCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.PRODUKSI, Role.KURIR)),
):
    """Record one processing step (cuci, kering, setrika, ...) of a nota."""
    return create_production(db, current_user.id, request)


@router.get("/search", response_model=ProductionSearchResponse)
async def search(
    nota: str = Query(..., description="Nota number"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_roles(Role.PRODUKSI, Role.KURIR, Role.ADMIN)),
):
    """Track a nota through its processing steps."""
    items = search_by_nota(db, nota)
    return ProductionSearchResponse(nota_number=nota.strip(), items=items)
