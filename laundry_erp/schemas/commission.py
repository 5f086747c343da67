"""
Commission schemas
"""
from typing import List
from pydantic import BaseModel, ConfigDict, Field


class CommissionResult(BaseModel):
    """Commission of one production process within a period"""
    process: str
    total_kg: float
    rate_per_kg: int
    total: int


class CommissionRateOut(BaseModel):
    process: str
    rate_per_kg: int

    model_config = ConfigDict(from_attributes=True)


class CommissionRateUpdate(BaseModel):
    rate_per_kg: int = Field(..., ge=0, description="Rupiah per kg")


class CommissionBreakdownOut(BaseModel):
    employee_id: int
    month: int
    year: int
    items: List[CommissionResult]
    total: int
