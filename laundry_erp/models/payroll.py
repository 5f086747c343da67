"""
Payroll period model: one row per (employee, month, year)
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from laundry_erp.db.base import Base


class PayrollPeriod(Base):
    __tablename__ = "payroll"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    # Income (Rupiah)
    base_salary = Column(Integer, default=0, nullable=False)
    meal_allowance = Column(Integer, default=0, nullable=False)
    transport_allowance = Column(Integer, default=0, nullable=False)
    overtime_hours = Column(Numeric(6, 2), default=0, nullable=False)
    overtime_rate = Column(Integer, default=7000, nullable=False)
    holiday_overtime_hours = Column(Numeric(6, 2), default=0, nullable=False)
    holiday_overtime_rate = Column(Integer, default=35000, nullable=False)
    position_allowance = Column(Integer, default=0, nullable=False)
    holiday_bonus = Column(Integer, default=0, nullable=False)
    commission_total = Column(Integer, default=0, nullable=False)

    # Deductions (Rupiah)
    late_penalty = Column(Integer, default=0, nullable=False)
    other_penalty = Column(Integer, default=0, nullable=False)
    cash_advance = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    __table_args__ = (
        UniqueConstraint("employee_id", "month", "year", name="uq_payroll_employee_period"),
    )

    employee = relationship("Employee", backref="payroll_periods")
