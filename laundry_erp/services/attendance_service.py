"""
Attendance service - clock events and attendance listing
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from laundry_erp.constants import ATTENDANCE_ACTIVE, ATTENDANCE_IN, ATTENDANCE_OUT
from laundry_erp.core.exceptions import InvalidFormat
from laundry_erp.models.attendance import AttendanceLog
from laundry_erp.utils.timezone import day_boundaries_utc, now_utc

logger = logging.getLogger(__name__)


def record_clock_event(
    db: Session,
    employee_id: int,
    type: str,
    shift: Optional[str] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
) -> AttendanceLog:
    """
    Record a clock-in or clock-out at the server's UTC time

    The shift is kept only on clock-in rows; it decides lateness later.

    Args:
        db: Database session
        employee_id: Employee clocking in/out
        type: "in" or "out"
        shift: "pagi" or "sore" (clock-in only, optional)
        lat: GPS latitude (optional)
        lng: GPS longitude (optional)

    Returns:
        Created AttendanceLog instance
    """
    if type not in (ATTENDANCE_IN, ATTENDANCE_OUT):
        raise InvalidFormat(f"Invalid attendance type: {type}")

    attendance_log = AttendanceLog(
        employee_id=employee_id,
        type=type,
        timestamp=now_utc(),
        lat=lat,
        lng=lng,
        shift=shift if type == ATTENDANCE_IN else None,
    )
    db.add(attendance_log)
    db.commit()
    db.refresh(attendance_log)

    logger.info("Clock-%s recorded for employee %s", type, employee_id)
    return attendance_log


def list_attendance(
    db: Session,
    local_date: Optional[str] = None,
    employee_id: Optional[int] = None,
    include_annulled: bool = True,
) -> List[AttendanceLog]:
    """
    List attendance records, optionally for one local calendar date

    Args:
        local_date: YYYY-MM-DD on the local calendar
        employee_id: Only this employee's records
        include_annulled: Also return annulled records
    """
    query = db.query(AttendanceLog)
    if local_date:
        start, end = day_boundaries_utc(local_date)
        query = query.filter(AttendanceLog.timestamp >= start, AttendanceLog.timestamp <= end)
    if employee_id is not None:
        query = query.filter(AttendanceLog.employee_id == employee_id)
    if not include_annulled:
        query = query.filter(AttendanceLog.status == ATTENDANCE_ACTIVE)
    return query.order_by(AttendanceLog.timestamp.desc(), AttendanceLog.id.desc()).all()
