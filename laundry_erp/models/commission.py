"""
Commission rate model
"""
from sqlalchemy import Column, Integer, String
from laundry_erp.db.base import Base


class CommissionRate(Base):
    __tablename__ = "commission_rates"

    id = Column(Integer, primary_key=True, index=True)
    process = Column(String, unique=True, nullable=False)
    rate_per_kg = Column(Integer, default=0, nullable=False)  # Rupiah per kg
