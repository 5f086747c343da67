"""
Production models: one processing step of one nota (receipt), and its admin edit history
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, String, Numeric, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from laundry_erp.db.base import Base
from laundry_erp.utils.timezone import now_utc


class ProductionEntry(Base):
    __tablename__ = "production"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    customer_name = Column(String, nullable=False)
    nota_number = Column(String, nullable=False, index=True)
    process = Column(String, nullable=False)
    weight = Column(Numeric(10, 2), default=0, nullable=False)  # kg; 0 for weight-optional processes
    qty = Column(Integer, nullable=False)
    service_price = Column(Integer, default=0, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=now_utc, index=True)

    # Admin audit
    verified_status = Column(String, default="unverified", nullable=False)  # "verified" | "unverified"
    verified_by = Column(Integer, ForeignKey("employees.id"), nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    edited_by_admin = Column(Integer, ForeignKey("employees.id"), nullable=True)

    __table_args__ = (
        UniqueConstraint("nota_number", "process", name="uq_production_nota_process"),
    )

    employee = relationship("Employee", foreign_keys=[employee_id], backref="production_entries")
    verified_by_employee = relationship("Employee", foreign_keys=[verified_by])


class ProductionEditHistory(Base):
    """One changed field of one admin edit"""
    __tablename__ = "production_edit_history"

    id = Column(Integer, primary_key=True, index=True)
    production_id = Column(Integer, ForeignKey("production.id"), nullable=False, index=True)
    admin_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    field_changed = Column(String, nullable=False)
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)

    admin = relationship("Employee")
