"""
Attendance model: one row per clock event ('in' or 'out')
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, String, Numeric, Text
from sqlalchemy.orm import relationship
from laundry_erp.db.base import Base
from laundry_erp.utils.timezone import now_utc


class AttendanceLog(Base):
    __tablename__ = "attendance"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    type = Column(String(3), nullable=False)  # "in" | "out"
    timestamp = Column(DateTime(timezone=True), nullable=False, default=now_utc, index=True)  # Server UTC timestamp
    lat = Column(Numeric(10, 8), nullable=True)
    lng = Column(Numeric(11, 8), nullable=True)
    shift = Column(String, nullable=True)  # "pagi" | "sore", set on clock-in

    # Lifecycle: active -> annulled. Original event columns above are never rewritten.
    status = Column(String, default="active", nullable=False, index=True)
    annulled_by = Column(Integer, ForeignKey("employees.id"), nullable=True)
    annulled_at = Column(DateTime(timezone=True), nullable=True)
    annulled_reason = Column(Text, nullable=True)

    employee = relationship("Employee", foreign_keys=[employee_id], backref="attendance_logs")
    annulled_by_employee = relationship("Employee", foreign_keys=[annulled_by])
