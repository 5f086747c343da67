"""
Cash advance (kasbon) ledger

An advance belongs to the local calendar month it was recorded in, and the
payroll draft of that month deducts the month's total.
"""
import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from laundry_erp.constants import ACTION_CASH_ADVANCE_ADDED, ACTION_CASH_ADVANCE_DELETED
from laundry_erp.core.exceptions import InvalidFormat, NotFound
from laundry_erp.models.cash_advance import CashAdvance
from laundry_erp.models.employee import Employee
from laundry_erp.services.audit_service import log_audit
from laundry_erp.utils.timezone import month_boundaries_utc, now_utc

logger = logging.getLogger(__name__)


def add_cash_advance(
    db: Session,
    employee_id: int,
    amount: Optional[int],
    actor_id: int,
    note: Optional[str] = None,
) -> CashAdvance:
    """
    Record a cash advance paid to an employee

    Raises:
        InvalidFormat: If the amount is missing or not positive
        NotFound: If the employee does not exist
    """
    if amount is None or isinstance(amount, bool) or amount <= 0:
        raise InvalidFormat("Cash advance amount must be greater than 0")
    if db.query(Employee.id).filter(Employee.id == employee_id).first() is None:
        raise NotFound(f"Employee {employee_id} not found")

    advance = CashAdvance(
        employee_id=employee_id,
        amount=amount,
        note=note.strip() if note and note.strip() else None,
        created_by=actor_id,
        created_at=now_utc(),
    )
    db.add(advance)
    db.flush()
    log_audit(
        db=db,
        actor_id=actor_id,
        action=ACTION_CASH_ADVANCE_ADDED,
        entity_type="kasbon",
        entity_id=advance.id,
        detail={"employee_id": employee_id, "amount": amount},
        commit=False,
    )
    db.commit()
    db.refresh(advance)
    logger.info("Cash advance %s of %s recorded for employee %s", advance.id, amount, employee_id)
    return advance


def list_cash_advances(
    db: Session,
    month: Optional[int] = None,
    year: Optional[int] = None,
    employee_id: Optional[int] = None,
) -> List[CashAdvance]:
    """Advances, newest first; month and year together narrow to one local month."""
    query = db.query(CashAdvance)
    if month is not None and year is not None:
        start, end = month_boundaries_utc(month, year)
        query = query.filter(CashAdvance.created_at >= start, CashAdvance.created_at <= end)
    if employee_id is not None:
        query = query.filter(CashAdvance.employee_id == employee_id)
    return query.order_by(CashAdvance.created_at.desc(), CashAdvance.id.desc()).all()


def delete_cash_advance(db: Session, advance_id: int, actor_id: int) -> None:
    advance = db.query(CashAdvance).filter(CashAdvance.id == advance_id).first()
    if advance is None:
        raise NotFound(f"Cash advance {advance_id} not found")

    detail = {"employee_id": advance.employee_id, "amount": advance.amount}
    db.delete(advance)
    log_audit(
        db=db,
        actor_id=actor_id,
        action=ACTION_CASH_ADVANCE_DELETED,
        entity_type="kasbon",
        entity_id=advance_id,
        detail=detail,
        commit=False,
    )
    db.commit()
    logger.info("Cash advance %s deleted by %s", advance_id, actor_id)


def cash_advance_total(db: Session, employee_id: int, month: int, year: int) -> int:
    """Sum of an employee's advances within the local calendar month."""
    start, end = month_boundaries_utc(month, year)
    total = (
        db.query(func.coalesce(func.sum(CashAdvance.amount), 0))
        .filter(
            CashAdvance.employee_id == employee_id,
            CashAdvance.created_at >= start,
            CashAdvance.created_at <= end,
        )
        .scalar()
    )
    return int(total or 0)
