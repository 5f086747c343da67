"""
Attendance annulment state machine

A record starts 'active' and may be annulled exactly once. Annulment keeps the
original clock event intact, stamps who/when/why, and leaves an audit entry
holding the pre-annulment snapshot. Annulled records are excluded from every
downstream count (attendance days, lateness, overtime).
"""
import json
import logging
from datetime import datetime
from numbers import Number
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy.orm import Session

from laundry_erp.constants import (
    ACTION_ATTENDANCE_ANNULLED,
    ANNULMENT_ALLOWED_ROLES,
    ATTENDANCE_ACTIVE,
    ATTENDANCE_ANNULLED,
)
from laundry_erp.core.exceptions import AlreadyAnnulled, InvalidFormat, NotAuthorized, NotFound
from laundry_erp.models.attendance import AttendanceLog
from laundry_erp.models.employee import Employee
from laundry_erp.schemas.attendance import AnnulmentAuditEntry, AnnulmentData, AttendanceRecord
from laundry_erp.services.audit_service import log_audit
from laundry_erp.utils.roles import role_name
from laundry_erp.utils.timezone import iso_8601_utc, now_utc

logger = logging.getLogger(__name__)

_REQUIRED_DETAIL_NUMBERS = ("attendance_id", "admin_id")
_REQUIRED_DETAIL_STRINGS = ("reason", "annulled_at")


def can_annul(record: Any) -> bool:
    return getattr(record, "status", None) == ATTENDANCE_ACTIVE


def is_valid_reason(reason: Any) -> bool:
    """A reason must be a string with at least one non-whitespace character."""
    return isinstance(reason, str) and len(reason.strip()) > 0


def apply_annulment(record: AttendanceRecord, data: AnnulmentData) -> AttendanceRecord:
    """
    Return the annulled copy of an active record

    The caller must have checked can_annul(); the state is not re-checked here.
    Identity and event fields are carried over unchanged.
    """
    return record.model_copy(update={
        "status": ATTENDANCE_ANNULLED,
        "annulled_by": data.admin_id,
        "annulled_at": data.annulled_at,
        "annulled_reason": data.reason.strip(),
    })


def filter_active(records: Iterable[Any]) -> List[Any]:
    return [r for r in records if getattr(r, "status", None) == ATTENDANCE_ACTIVE]


def count_active(records: Iterable[Any]) -> int:
    return len(filter_active(records))


def is_authorized_to_annul(role: Any) -> bool:
    """Closed allow-list: any role not listed, including unknown strings, is refused."""
    if role is None:
        return False
    return role_name(role) in ANNULMENT_ALLOWED_ROLES


def original_snapshot(record: Any) -> Dict[str, Any]:
    """Event fields of an attendance record as they were before annulment."""
    return {
        "employee_id": record.employee_id,
        "type": record.type,
        "timestamp": iso_8601_utc(record.timestamp),
        "lat": float(record.lat) if record.lat is not None else None,
        "lng": float(record.lng) if record.lng is not None else None,
    }


def build_annulment_audit(
    admin_id: int,
    attendance_id: int,
    reason: str,
    annulled_at: Union[datetime, str],
    original_data: Dict[str, Any],
) -> AnnulmentAuditEntry:
    """
    Build the audit entry recorded for an annulment

    Args:
        admin_id: Annulling admin, recorded as the actor
        attendance_id: Annulled record
        reason: Annulment reason (stored trimmed)
        annulled_at: Annulment instant; datetimes are stored as UTC ISO strings
        original_data: Snapshot of the record before annulment

    Returns:
        AnnulmentAuditEntry with a JSON detail payload
    """
    if isinstance(annulled_at, datetime):
        annulled_at = iso_8601_utc(annulled_at)
    detail = {
        "attendance_id": attendance_id,
        "admin_id": admin_id,
        "reason": reason.strip(),
        "annulled_at": annulled_at,
        "original_data": original_data,
    }
    return AnnulmentAuditEntry(
        actor_id=admin_id,
        action=ACTION_ATTENDANCE_ANNULLED,
        entity_id=attendance_id,
        detail=json.dumps(detail, ensure_ascii=False),
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def parse_annulment_detail(serialized: Any) -> Optional[Dict[str, Any]]:
    """
    Deserialize an annulment audit detail

    Returns:
        The detail dict, or None if the payload is malformed or a required field
        is missing or has the wrong type. Never raises.
    """
    if not isinstance(serialized, (str, bytes, bytearray)):
        return None
    try:
        detail = json.loads(serialized)
    except ValueError:
        return None
    if not isinstance(detail, dict):
        return None
    if not all(_is_number(detail.get(key)) for key in _REQUIRED_DETAIL_NUMBERS):
        return None
    if not all(isinstance(detail.get(key), str) for key in _REQUIRED_DETAIL_STRINGS):
        return None
    if detail.get("original_data") is None:
        return None
    return detail


def validate_audit_entry(entry: Any, attendance_id: int, admin_id: int, reason: str) -> bool:
    """Check an audit entry (schema or AuditLog row) against the annulment it should describe."""
    if getattr(entry, "action", None) != ACTION_ATTENDANCE_ANNULLED:
        return False
    if getattr(entry, "actor_id", None) != admin_id:
        return False
    detail = parse_annulment_detail(getattr(entry, "detail", None))
    if detail is None:
        return False
    return (
        detail["attendance_id"] == attendance_id
        and detail["admin_id"] == admin_id
        and detail["reason"] == (reason.strip() if isinstance(reason, str) else reason)
    )


def annul_attendance(db: Session, attendance_id: int, admin: Employee, reason: Any) -> AttendanceLog:
    """
    Annul one attendance record and write its audit entry in the same transaction

    The state change is a conditional UPDATE guarded by status = 'active', so of two
    concurrent requests for the same record only one can succeed.

    Raises:
        NotAuthorized: If the caller's role may not annul
        InvalidFormat: If the reason is missing or blank
        NotFound: If the record does not exist
        AlreadyAnnulled: If the record is no longer active
    """
    if not is_authorized_to_annul(admin.role):
        logger.warning("Annulment of attendance %s refused for user %s (role %s)", attendance_id, admin.id, admin.role)
        raise NotAuthorized("Only admin can annul attendance records")
    if not is_valid_reason(reason):
        raise InvalidFormat("Annulment reason is required")

    row = db.query(AttendanceLog).filter(AttendanceLog.id == attendance_id).first()
    if row is None:
        raise NotFound(f"Attendance record {attendance_id} not found")

    record = AttendanceRecord.model_validate(row)
    if not can_annul(record):
        raise AlreadyAnnulled(f"Attendance record {attendance_id} is already annulled")

    annulled = apply_annulment(record, AnnulmentData(admin_id=admin.id, reason=reason, annulled_at=now_utc()))
    updated = (
        db.query(AttendanceLog)
        .filter(AttendanceLog.id == attendance_id, AttendanceLog.status == ATTENDANCE_ACTIVE)
        .update(
            {
                AttendanceLog.status: annulled.status,
                AttendanceLog.annulled_by: annulled.annulled_by,
                AttendanceLog.annulled_at: annulled.annulled_at,
                AttendanceLog.annulled_reason: annulled.annulled_reason,
            },
            synchronize_session=False,
        )
    )
    if updated == 0:
        db.rollback()
        raise AlreadyAnnulled(f"Attendance record {attendance_id} is already annulled")

    entry = build_annulment_audit(
        admin_id=admin.id,
        attendance_id=attendance_id,
        reason=annulled.annulled_reason,
        annulled_at=annulled.annulled_at,
        original_data=original_snapshot(record),
    )
    log_audit(
        db=db,
        actor_id=entry.actor_id,
        action=entry.action,
        entity_type=entry.entity_type,
        entity_id=entry.entity_id,
        detail=entry.detail,
        commit=False,
    )
    db.commit()
    db.refresh(row)

    logger.info("Attendance %s annulled by admin %s", attendance_id, admin.id)
    return row
