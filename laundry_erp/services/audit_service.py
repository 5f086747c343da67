"""
Audit logging service
"""
from typing import Optional, Dict, Any, Union
from sqlalchemy.orm import Session
from laundry_erp.models.audit_log import AuditLog
from laundry_erp.utils.json_serializer import dumps_detail
from laundry_erp.utils.timezone import now_utc


def log_audit(
    db: Session,
    actor_id: int,
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    detail: Optional[Union[Dict[str, Any], str]] = None,
    commit: bool = True,
) -> AuditLog:
    """
    Append an audit log entry

    Args:
        db: Database session
        actor_id: ID of the user performing the action
        action: Action tag (e.g., "ATTENDANCE_ANNULLED", "PAYROLL_SAVED")
        entity_type: Type of entity (e.g., "attendance", "payroll")
        entity_id: ID of the affected entity (optional)
        detail: Payload, serialized to JSON before storing; strings are stored as-is (optional)
        commit: Commit immediately; pass False to join the caller's transaction

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        detail=dumps_detail(detail),
        created_at=now_utc()
    )
    db.add(audit_log)
    if commit:
        db.commit()
        db.refresh(audit_log)
    else:
        db.flush()
    return audit_log
