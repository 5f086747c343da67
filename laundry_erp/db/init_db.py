"""
Database initialization helpers
"""
import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from laundry_erp.constants import VALID_PROCESSES
from laundry_erp.db.base import Base
from laundry_erp.models.commission import CommissionRate

logger = logging.getLogger(__name__)


def create_tables(engine: Engine) -> None:
    """Create all tables that do not exist yet. Models must be imported first."""
    import laundry_erp.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def seed_commission_rates(db: Session, default_rate: Optional[int] = 0) -> int:
    """
    Ensure every production process has a commission rate row

    Existing rates are left untouched.

    Returns:
        Number of rows created
    """
    existing = {process for (process,) in db.query(CommissionRate.process).all()}
    created = 0
    for process in VALID_PROCESSES:
        if process in existing:
            continue
        db.add(CommissionRate(process=process, rate_per_kg=default_rate or 0))
        created += 1
    if created:
        db.commit()
        logger.info("Seeded %d commission rate rows", created)
    return created
