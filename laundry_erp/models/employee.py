"""
Employee model
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date
from sqlalchemy.sql import func
import enum
from laundry_erp.db.base import Base


class Role(str, enum.Enum):
    ADMIN = "admin"
    GUDANG = "gudang"
    PRODUKSI = "produksi"
    KURIR = "kurir"


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False)
    join_date = Column(Date, nullable=False)  # Tenure is derived from this per payroll period
    base_salary = Column(Integer, default=0, nullable=False)  # Gaji pokok, Rupiah
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)
