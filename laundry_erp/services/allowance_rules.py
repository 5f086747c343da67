"""
Allowance rule set: tenure, position/meal/transport allowances, lateness and overtime.

Pure functions, no I/O. Count-style inputs that are None or not numeric are
treated as zero so a payroll draft degrades gracefully on incomplete data.
All amounts are Rupiah.
"""
import math
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, NamedTuple, Optional, Tuple, Union

from laundry_erp.constants import (
    ATTENDANCE_IN,
    ATTENDANCE_OUT,
    DENDA_PER_LATE,
    JAM_KERJA_NORMAL,
    LATE_TOLERANCE_MINUTES,
    LEMBUR_MIN_HOURS,
    LEMBUR_RATE_PER_HOUR,
    MAX_SHIFT_HOURS,
    SHIFT_CONFIG,
    TENURE_SENIOR_AFTER_MONTHS,
    TUNJANGAN_JABATAN_FIRST_TIER,
    TUNJANGAN_JABATAN_STEP,
    UANG_MAKAN_RATE_JUNIOR,
    UANG_MAKAN_RATE_SENIOR,
    UANG_TRANSPORT_PER_DAY,
)
from laundry_erp.core.exceptions import InvalidFormat
from laundry_erp.services.annulment_service import filter_active
from laundry_erp.utils.timezone import Instant, local_date_of, minutes_since_local_midnight, parse_instant

Number = Union[int, float]


def _num(value: Any) -> Number:
    if isinstance(value, bool):
        return 0
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (int, float)) and not math.isnan(value):
        return value
    return 0


def _rupiah(amount: Number) -> str:
    """Format like 150.000 (id-ID grouping)."""
    return f"{int(amount):,}".replace(",", ".")


def _as_date(value: Union[date, datetime, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise InvalidFormat(f"Invalid join date: {value}") from None


def tenure_months(join_date: Union[date, datetime, str], month: int, year: int) -> int:
    """
    Whole months of service at the start of a payroll month

    Only year and month of the join date count, so joining on the last day of a
    month still makes that month month 0. Future join dates clamp to 0.
    """
    joined = _as_date(join_date)
    months = (int(year) - joined.year) * 12 + (int(month) - joined.month)
    return max(0, months)


def position_allowance(tenure: Any) -> int:
    """
    Tunjangan jabatan by tenure tier

    0-12 months: 0, 13-24: 150.000, then +100.000 for every further 12-month block.
    """
    tenure = _num(tenure)
    if tenure <= TENURE_SENIOR_AFTER_MONTHS:
        return 0
    period = int((tenure - 1) // 12)
    if period == 1:
        return TUNJANGAN_JABATAN_FIRST_TIER
    return TUNJANGAN_JABATAN_FIRST_TIER + (period - 1) * TUNJANGAN_JABATAN_STEP


def meal_allowance_rate(tenure: Any) -> int:
    """Uang makan per attendance day: two flat tiers split at 12 months."""
    if _num(tenure) > TENURE_SENIOR_AFTER_MONTHS:
        return UANG_MAKAN_RATE_SENIOR
    return UANG_MAKAN_RATE_JUNIOR


def shift_start_minutes(shift: str) -> int:
    try:
        hour, minute = SHIFT_CONFIG[shift]
    except (KeyError, TypeError):
        raise InvalidFormat(f"Unknown shift: {shift}") from None
    return hour * 60 + minute


def is_late(clock_in: Instant, shift: str, offset: Optional[timedelta] = None) -> bool:
    """
    True if the clock-in falls after shift start plus tolerance, on the local wall clock

    Clocking in exactly at the end of the tolerance (07:15 for 'pagi') is on time.
    Seconds are ignored.
    """
    deadline = shift_start_minutes(shift) + LATE_TOLERANCE_MINUTES
    return minutes_since_local_midnight(clock_in, offset) > deadline


def late_penalty(late_days: Any) -> Number:
    return _num(late_days) * DENDA_PER_LATE


def transport_allowance(attendance_days: Any) -> Number:
    return _num(attendance_days) * UANG_TRANSPORT_PER_DAY


def overtime_hours(total_work_hours: Any) -> Number:
    """
    Compensated overtime for one day's worked hours

    Hours beyond the 8-hour baseline count only once they reach 3; below that
    nothing is paid. Fractional hours are returned as-is.
    """
    raw = _num(total_work_hours) - JAM_KERJA_NORMAL
    if raw < LEMBUR_MIN_HOURS:
        return 0
    return raw


def overtime_amount(hours: Any) -> Number:
    return _num(hours) * LEMBUR_RATE_PER_HOUR


def position_allowance_formula(tenure: int, amount: Number) -> str:
    if tenure <= TENURE_SENIOR_AFTER_MONTHS:
        return f"Masa kerja {tenure} bulan (≤12 bulan): Rp 0"
    return f"Masa kerja {tenure} bulan (>12 bulan): Rp {_rupiah(amount)}"


def meal_allowance_formula(attendance_days: int, rate: Number, tenure: int) -> str:
    tier = "masa kerja >12 bulan" if tenure > TENURE_SENIOR_AFTER_MONTHS else "masa kerja ≤12 bulan"
    return f"{attendance_days} hari x Rp {_rupiah(rate)} ({tier})"


def late_penalty_formula(late_days: int) -> str:
    if not late_days:
        return "Tidak ada keterlambatan"
    return f"{late_days} hari terlambat x Rp {_rupiah(DENDA_PER_LATE)}"


class AttendanceSummary(NamedTuple):
    attendance_days: int
    late_days: int
    overtime_hours: int


def summarize_attendance(records: Iterable[Any], offset: Optional[timedelta] = None) -> AttendanceSummary:
    """
    Fold a month of attendance records into per-local-day payroll figures

    Annulled records are ignored. A working day is keyed by the local date of
    its first clock-in:
    - it counts as an attendance day if it has an active clock-in;
    - it is a late day if that first clock-in carries a shift and is late for it;
    - each clock-out belongs to the most recent clock-in's day, so a shift that
      runs past local midnight (sore) keeps its clock-out. A clock-out more than
      MAX_SHIFT_HOURS after that day's first clock-in belongs to no day;
    - overtime is the span from the first clock-in to the last clock-out,
      passed through overtime_hours() and floored to whole hours.

    Args:
        records: Attendance rows or AttendanceRecord snapshots
        offset: Override for the configured local offset

    Returns:
        AttendanceSummary(attendance_days, late_days, overtime_hours)
    """
    events = sorted(
        (
            (parse_instant(record.timestamp), record)
            for record in filter_active(records)
            if record.type in (ATTENDANCE_IN, ATTENDANCE_OUT)
        ),
        key=lambda item: item[0],
    )
    limit = timedelta(hours=MAX_SHIFT_HOURS)

    first_in: Dict[str, Tuple[datetime, Any]] = {}
    last_out: Dict[str, datetime] = {}
    current_day = None
    for instant, record in events:
        if record.type == ATTENDANCE_IN:
            current_day = local_date_of(instant, offset)
            first_in.setdefault(current_day, (instant, record))
        elif current_day is not None and instant - first_in[current_day][0] <= limit:
            last_out[current_day] = instant

    late_days = 0
    total_overtime = 0
    for day, (started, record) in first_in.items():
        shift = getattr(record, "shift", None)
        if shift and is_late(started, shift, offset):
            late_days += 1

        ended = last_out.get(day)
        if ended is not None and ended > started:
            worked = (ended - started).total_seconds() / 3600
            total_overtime += math.floor(overtime_hours(worked))

    return AttendanceSummary(len(first_in), late_days, total_overtime)
