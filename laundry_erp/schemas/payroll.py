"""
Payroll schemas
"""
from datetime import datetime
from typing import Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from laundry_erp.schemas.commission import CommissionResult
from laundry_erp.utils.timezone import iso_8601_utc

Number = Union[int, float]


class PayrollFields(BaseModel):
    """
    Per-employee monthly payroll figures (Rupiah)

    Overtime rates left as None fall back to the default regular/holiday rate;
    an explicit 0 is kept as 0.
    """
    base_salary: int = Field(0, ge=0)
    meal_allowance: int = Field(0, ge=0)
    transport_allowance: int = Field(0, ge=0)
    overtime_hours: float = Field(0, ge=0)
    overtime_rate: Optional[int] = Field(None, ge=0)
    holiday_overtime_hours: float = Field(0, ge=0)
    holiday_overtime_rate: Optional[int] = Field(None, ge=0)
    position_allowance: int = Field(0, ge=0)
    holiday_bonus: int = Field(0, ge=0, description="THR")
    commission_total: int = Field(0, ge=0)
    late_penalty: int = Field(0, ge=0)
    other_penalty: int = Field(0, ge=0)
    cash_advance: int = Field(0, ge=0, description="Kasbon")


class PayrollSummary(BaseModel):
    """Computed totals; fractional overtime hours can make them fractional"""
    overtime_regular_total: Number
    overtime_holiday_total: Number
    gross_income: Number
    total_deductions: Number
    net_salary: Number


class PayrollSaveRequest(PayrollFields):
    """Schema for saving (create or overwrite) one payroll period"""
    employee_id: int = Field(..., gt=0)
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)


class PayrollDraftOut(BaseModel):
    """Computed payroll proposal, before the admin saves it"""
    employee_id: int
    employee_name: str
    month: int
    year: int
    tenure_months: int
    attendance_days: int
    late_days: int
    fields: PayrollFields
    summary: PayrollSummary
    commission: List[CommissionResult]
    formulas: Dict[str, str]


class PayrollRecordOut(BaseModel):
    id: Optional[int] = None
    employee_id: int
    employee_name: Optional[str] = None
    month: int
    year: int
    saved: bool = True
    fields: PayrollFields
    summary: PayrollSummary
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("updated_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)
