"""
Commission calculator and commission rate table
"""
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from laundry_erp.constants import ACTION_COMMISSION_RATE_UPDATED, VALID_PROCESSES, WEIGHT_OPTIONAL_PROCESSES
from laundry_erp.core.exceptions import InvalidFormat
from laundry_erp.models.commission import CommissionRate
from laundry_erp.models.production import ProductionEntry
from laundry_erp.schemas.commission import CommissionResult
from laundry_erp.services.audit_service import log_audit
from laundry_erp.utils.timezone import month_boundaries_utc

logger = logging.getLogger(__name__)


def _decimal(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return Decimal(0)
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal(0)


def is_valid_process(process: Any) -> bool:
    return process in VALID_PROCESSES


def is_weight_required(process: str) -> bool:
    """Every process except the quantity-only ones needs a positive weight."""
    return process not in WEIGHT_OPTIONAL_PROCESSES


def commission_for(total_kg: Any, rate_per_kg: Any) -> int:
    """total_kg x rate_per_kg, rounded half up to whole Rupiah."""
    amount = _decimal(total_kg) * _decimal(rate_per_kg)
    if not amount.is_finite():
        return 0
    return int(amount.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def commissions_for_period(
    production_totals: Iterable[Tuple[str, Any]],
    rate_table: Mapping[str, int],
) -> List[CommissionResult]:
    """
    Commission per (process, total_kg) entry

    Input order is kept and repeated processes are not merged; callers pass
    totals already aggregated per process. A process missing from the rate
    table earns nothing.
    """
    results = []
    for process, total_kg in production_totals:
        rate = rate_table.get(process) or 0
        results.append(CommissionResult(
            process=process,
            total_kg=float(_decimal(total_kg)),
            rate_per_kg=rate,
            total=commission_for(total_kg, rate),
        ))
    return results


def total_commission(results: Sequence[CommissionResult]) -> int:
    return sum(result.total for result in results)


def production_totals_for_period(db: Session, employee_id: int, month: int, year: int) -> List[Tuple[str, float]]:
    """Sum of production weight per process for one employee over a local calendar month."""
    start, end = month_boundaries_utc(month, year)
    rows = (
        db.query(ProductionEntry.process, func.sum(ProductionEntry.weight))
        .filter(
            ProductionEntry.employee_id == employee_id,
            ProductionEntry.timestamp >= start,
            ProductionEntry.timestamp <= end,
        )
        .group_by(ProductionEntry.process)
        .order_by(ProductionEntry.process)
        .all()
    )
    return [(process, float(_decimal(total))) for process, total in rows]


def list_rates(db: Session) -> List[CommissionRate]:
    return db.query(CommissionRate).order_by(CommissionRate.process).all()


def rate_table(db: Session) -> Dict[str, int]:
    return {rate.process: rate.rate_per_kg for rate in list_rates(db)}


def update_rate(db: Session, process: str, rate_per_kg: int, actor_id: int) -> CommissionRate:
    """
    Set the commission rate of a process, creating the row if needed

    Raises:
        InvalidFormat: If the process is unknown or the rate is negative
    """
    if not is_valid_process(process):
        raise InvalidFormat(f"Invalid process: {process}. Expected one of {', '.join(VALID_PROCESSES)}")
    if rate_per_kg is None or rate_per_kg < 0:
        raise InvalidFormat("Commission rate must be zero or positive")

    rate = db.query(CommissionRate).filter(CommissionRate.process == process).first()
    old_rate = rate.rate_per_kg if rate else None
    if rate is None:
        rate = CommissionRate(process=process, rate_per_kg=rate_per_kg)
        db.add(rate)
    else:
        rate.rate_per_kg = rate_per_kg
    db.flush()

    log_audit(
        db=db,
        actor_id=actor_id,
        action=ACTION_COMMISSION_RATE_UPDATED,
        entity_type="commission_rates",
        entity_id=rate.id,
        detail={"process": process, "old_rate": old_rate, "new_rate": rate_per_kg},
        commit=False,
    )
    db.commit()
    db.refresh(rate)
    logger.info("Commission rate for %s set to %s by %s", process, rate_per_kg, actor_id)
    return rate
