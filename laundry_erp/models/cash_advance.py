"""
Cash advance (kasbon) model: money paid out ahead of payroll, deducted in its local month
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from laundry_erp.db.base import Base
from laundry_erp.utils.timezone import now_utc


class CashAdvance(Base):
    __tablename__ = "kasbon"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)  # Rupiah, > 0
    note = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("employees.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc, index=True)

    employee = relationship("Employee", foreign_keys=[employee_id], backref="cash_advances")
