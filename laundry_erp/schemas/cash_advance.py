"""
Cash advance (kasbon) schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from laundry_erp.utils.timezone import iso_8601_utc


class CashAdvanceCreate(BaseModel):
    """Schema for recording a cash advance. Amount rules are checked by the service."""
    employee_id: int = Field(..., gt=0)
    amount: Optional[int] = Field(None, description="Rupiah, greater than 0")
    note: Optional[str] = None


class CashAdvanceOut(BaseModel):
    id: int
    employee_id: int
    employee_name: Optional[str] = None
    amount: int
    note: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)
