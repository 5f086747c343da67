"""
Attendance schemas: clock events, the attendance record snapshot used by the
annulment state machine, and the annulment request/response bodies.
"""
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_serializer

from laundry_erp.utils.timezone import iso_8601_utc, iso_local

AttendanceType = Literal["in", "out"]
AttendanceStatus = Literal["active", "annulled"]
ShiftKind = Literal["pagi", "sore"]


class AttendanceRecord(BaseModel):
    """Attendance record snapshot. Annulment metadata is set iff status is 'annulled'."""
    id: int
    employee_id: int
    type: AttendanceType
    timestamp: datetime
    lat: Optional[float] = None
    lng: Optional[float] = None
    shift: Optional[ShiftKind] = None
    status: AttendanceStatus = "active"
    annulled_by: Optional[int] = None
    annulled_at: Optional[datetime] = None
    annulled_reason: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, frozen=True)


class AnnulmentData(BaseModel):
    """Who annuls, why, and when"""
    admin_id: int
    reason: str
    annulled_at: datetime


class ClockRequest(BaseModel):
    """Schema for a clock-in / clock-out event"""
    type: AttendanceType = Field(..., description="'in' or 'out'")
    shift: Optional[ShiftKind] = Field(None, description="Shift for clock-in: 'pagi' or 'sore'")
    lat: Optional[float] = Field(None, ge=-90, le=90, description="GPS latitude")
    lng: Optional[float] = Field(None, ge=-180, le=180, description="GPS longitude")


class AnnulRequest(BaseModel):
    """Schema for annulling an attendance record. Reason is validated by the service."""
    attendance_id: int = Field(..., gt=0, description="Attendance record ID")
    reason: Optional[str] = Field(None, description="Why the record is annulled (required, non-blank)")


class AttendanceOut(BaseModel):
    """Schema for attendance output. Timestamps are UTC with 'Z'; timestamp_local carries the local offset."""
    id: int
    employee_id: int
    type: str
    timestamp: datetime
    lat: Optional[float] = None
    lng: Optional[float] = None
    shift: Optional[str] = None
    status: str
    annulled_by: Optional[int] = None
    annulled_at: Optional[datetime] = None
    annulled_reason: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("timestamp", "annulled_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)

    @computed_field
    @property
    def timestamp_local(self) -> Optional[str]:
        return iso_local(self.timestamp)


class AnnulResponse(BaseModel):
    success: bool
    message: str
    attendance: AttendanceOut


class AnnulmentAuditEntry(BaseModel):
    """Audit entry produced by an annulment; detail is the serialized JSON payload"""
    actor_id: int
    action: str
    entity_type: str = "attendance"
    entity_id: int
    detail: str
