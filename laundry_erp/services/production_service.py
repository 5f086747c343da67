"""
Production intake and admin audit service
"""
import logging
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from sqlalchemy.orm import Session

from laundry_erp.constants import (
    ACTION_PRODUCTION_EDITED,
    ACTION_PRODUCTION_UNVERIFIED,
    ACTION_PRODUCTION_VERIFIED,
    PROCESS_REQUIRING_SERVICE_PRICE,
    PRODUCTION_UNVERIFIED,
    PRODUCTION_VERIFIED,
    VALID_PROCESSES,
)
from laundry_erp.core.exceptions import InvalidFormat, NotFound, PreconditionViolation
from laundry_erp.models.employee import Employee
from laundry_erp.models.production import ProductionEditHistory, ProductionEntry
from laundry_erp.schemas.production import ProductionCreate, ProductionUpdate
from laundry_erp.services.audit_service import log_audit
from laundry_erp.services.commission_service import is_valid_process, is_weight_required
from laundry_erp.utils.timezone import month_boundaries_utc, now_utc

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("customer_name", "nota_number", "process", "weight", "qty", "service_price")


def _required_text(value, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidFormat(f"{label} is required")
    return value.strip()


def validate_production(data: ProductionCreate) -> None:
    """
    Check an intake request against the production rules

    Raises:
        InvalidFormat: On the first rule the request breaks
    """
    _required_text(data.customer_name, "Customer name")
    _required_text(data.nota_number, "Nota number")
    if not is_valid_process(data.process):
        raise InvalidFormat(f"Invalid process. Expected one of {', '.join(VALID_PROCESSES)}")
    if is_weight_required(data.process) and (not data.weight or data.weight <= 0):
        raise InvalidFormat("Weight must be greater than 0")
    if not data.qty or data.qty <= 0:
        raise InvalidFormat("Qty must be greater than 0")
    if data.process == PROCESS_REQUIRING_SERVICE_PRICE and (not data.service_price or data.service_price <= 0):
        raise InvalidFormat(f"Service price is required for {PROCESS_REQUIRING_SERVICE_PRICE}")


def create_production(db: Session, employee_id: int, data: ProductionCreate) -> ProductionEntry:
    """
    Record one production step

    Raises:
        InvalidFormat: If the request breaks a production rule
        PreconditionViolation: If the nota was already recorded for this process
    """
    validate_production(data)
    customer_name = data.customer_name.strip()
    nota_number = data.nota_number.strip()

    existing = db.query(ProductionEntry).filter(
        ProductionEntry.nota_number == nota_number,
        ProductionEntry.process == data.process,
    ).first()
    if existing:
        raise PreconditionViolation(f"Nota {nota_number} already recorded for process {data.process}")

    entry = ProductionEntry(
        employee_id=employee_id,
        customer_name=customer_name,
        nota_number=nota_number,
        process=data.process,
        weight=data.weight or 0,
        qty=data.qty,
        service_price=data.service_price or 0,
        timestamp=now_utc(),
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)

    logger.info("Production %s/%s recorded by employee %s", nota_number, data.process, employee_id)
    return entry


def search_by_nota(db: Session, nota_number: str) -> List[ProductionEntry]:
    """All production steps recorded for a nota, oldest first."""
    nota_number = _required_text(nota_number, "Nota number")
    return (
        db.query(ProductionEntry)
        .filter(ProductionEntry.nota_number == nota_number)
        .order_by(ProductionEntry.timestamp, ProductionEntry.id)
        .all()
    )


def get_production(db: Session, production_id: int) -> ProductionEntry:
    entry = db.query(ProductionEntry).filter(ProductionEntry.id == production_id).first()
    if entry is None:
        raise NotFound(f"Production entry {production_id} not found")
    return entry


def list_production(
    db: Session,
    month: int,
    year: int,
    employee_id: Optional[int] = None,
    verified: Optional[bool] = None,
) -> List[ProductionEntry]:
    """Production steps of a local calendar month, grouped by nota then process."""
    start, end = month_boundaries_utc(month, year)
    query = db.query(ProductionEntry).filter(
        ProductionEntry.timestamp >= start,
        ProductionEntry.timestamp <= end,
    )
    if employee_id is not None:
        query = query.filter(ProductionEntry.employee_id == employee_id)
    if verified is True:
        query = query.filter(ProductionEntry.verified_status == PRODUCTION_VERIFIED)
    elif verified is False:
        query = query.filter(ProductionEntry.verified_status != PRODUCTION_VERIFIED)
    return query.order_by(ProductionEntry.nota_number, ProductionEntry.process, ProductionEntry.timestamp).all()


def _history_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (Decimal, float)):
        return f"{float(value):g}"
    return str(value)


def _validate_update(data: ProductionUpdate) -> None:
    if data.customer_name is not None and not data.customer_name.strip():
        raise InvalidFormat("Customer name cannot be empty")
    if data.nota_number is not None and not data.nota_number.strip():
        raise InvalidFormat("Nota number cannot be empty")
    if data.process is not None and not is_valid_process(data.process):
        raise InvalidFormat(f"Invalid process. Expected one of {', '.join(VALID_PROCESSES)}")
    if data.weight is not None and data.weight < 0:
        raise InvalidFormat("Weight cannot be negative")
    if data.qty is not None and data.qty <= 0:
        raise InvalidFormat("Qty must be greater than 0")
    if data.service_price is not None and data.service_price < 0:
        raise InvalidFormat("Service price cannot be negative")


def update_production(
    db: Session,
    production_id: int,
    data: ProductionUpdate,
    admin: Employee,
) -> Tuple[ProductionEntry, int]:
    """
    Correct a production step and record one history row per changed field

    The edit changes the weights commission is computed from, so every
    change is kept in production_edit_history and the audit log.

    Returns:
        (entry, number of changed fields)

    Raises:
        NotFound: If the entry does not exist
        InvalidFormat: If a value is invalid or nothing changes
        PreconditionViolation: If the new (nota, process) is already recorded
    """
    entry = get_production(db, production_id)
    _validate_update(data)

    proposed = {
        "customer_name": data.customer_name.strip() if data.customer_name is not None else None,
        "nota_number": data.nota_number.strip() if data.nota_number is not None else None,
        "process": data.process,
        "weight": data.weight,
        "qty": data.qty,
        "service_price": data.service_price,
    }
    changes = []
    for field in EDITABLE_FIELDS:
        new_value = proposed[field]
        old_value = getattr(entry, field)
        if new_value is None:
            continue
        if field == "weight" and old_value is not None and float(old_value) == new_value:
            continue
        if new_value != old_value:
            changes.append((field, old_value, new_value))

    if not changes:
        raise InvalidFormat("No changes")

    nota_number = proposed["nota_number"] or entry.nota_number
    process = proposed["process"] or entry.process
    duplicate = db.query(ProductionEntry).filter(
        ProductionEntry.nota_number == nota_number,
        ProductionEntry.process == process,
        ProductionEntry.id != entry.id,
    ).first()
    if duplicate:
        raise PreconditionViolation(f"Nota {nota_number} already recorded for process {process}")

    now = now_utc()
    for field, old_value, new_value in changes:
        setattr(entry, field, new_value)
        db.add(ProductionEditHistory(
            production_id=entry.id,
            admin_id=admin.id,
            field_changed=field,
            old_value=_history_value(old_value),
            new_value=_history_value(new_value),
            created_at=now,
        ))
    entry.edited_by_admin = admin.id
    db.flush()

    log_audit(
        db=db,
        actor_id=admin.id,
        action=ACTION_PRODUCTION_EDITED,
        entity_type="production",
        entity_id=entry.id,
        detail={
            field: {"old": _history_value(old_value), "new": _history_value(new_value)}
            for field, old_value, new_value in changes
        },
        commit=False,
    )
    db.commit()
    db.refresh(entry)

    logger.info("Production %s edited by admin %s (%d fields)", entry.id, admin.id, len(changes))
    return entry, len(changes)


def production_history(db: Session, production_id: int) -> List[ProductionEditHistory]:
    """Edit history of a production step, newest first."""
    get_production(db, production_id)
    return (
        db.query(ProductionEditHistory)
        .filter(ProductionEditHistory.production_id == production_id)
        .order_by(ProductionEditHistory.created_at.desc(), ProductionEditHistory.id.desc())
        .all()
    )


def set_verification(db: Session, nota_number: Optional[str], verified: bool, admin: Employee) -> int:
    """
    Mark every production step of a nota as verified or unverified

    Returns:
        Number of steps updated

    Raises:
        InvalidFormat: If the nota number is missing
        NotFound: If the nota has no production steps
    """
    nota_number = _required_text(nota_number, "Nota number")
    new_status = PRODUCTION_VERIFIED if verified else PRODUCTION_UNVERIFIED

    count = (
        db.query(ProductionEntry)
        .filter(ProductionEntry.nota_number == nota_number)
        .update(
            {
                ProductionEntry.verified_status: new_status,
                ProductionEntry.verified_by: admin.id,
                ProductionEntry.verified_at: now_utc(),
            },
            synchronize_session="fetch",
        )
    )
    if count == 0:
        raise NotFound(f"Nota {nota_number} not found")

    log_audit(
        db=db,
        actor_id=admin.id,
        action=ACTION_PRODUCTION_VERIFIED if verified else ACTION_PRODUCTION_UNVERIFIED,
        entity_type="production",
        detail={"nota_number": nota_number, "count": count},
        commit=False,
    )
    db.commit()
    logger.info("Nota %s marked %s by admin %s (%d steps)", nota_number, new_status, admin.id, count)
    return count
