"""
Audit log model (append-only)
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from laundry_erp.db.base import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    action = Column(String, nullable=False)  # e.g., "ATTENDANCE_ANNULLED", "PAYROLL_SAVED"
    entity_type = Column(String, nullable=True)  # e.g., "attendance", "payroll"
    entity_id = Column(Integer, nullable=True)
    detail = Column(Text, nullable=True)  # Serialized JSON payload
    created_at = Column(DateTime(timezone=True), nullable=False)
