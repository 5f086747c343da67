"""
Payroll aggregator and payroll period persistence

The aggregator functions take a PayrollFields model or a plain mapping; any
missing or None amount counts as 0. Amounts are summed exactly: fractional
overtime hours can give a fractional Rupiah total, which is reported as-is.
Net salary may be negative (for example a large cash advance).
"""
import logging
from datetime import timedelta
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Tuple, Union

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from laundry_erp.constants import (
    ACTION_PAYROLL_SAVED,
    ATTENDANCE_OUT,
    DEFAULT_LEMBUR_JAM_RATE,
    DEFAULT_LEMBUR_LIBUR_RATE,
    MAX_SHIFT_HOURS,
)
from laundry_erp.core.exceptions import NotFound
from laundry_erp.models.attendance import AttendanceLog
from laundry_erp.models.employee import Employee
from laundry_erp.models.payroll import PayrollPeriod
from laundry_erp.schemas.payroll import PayrollDraftOut, PayrollFields, PayrollRecordOut, PayrollSummary
from laundry_erp.services import allowance_rules
from laundry_erp.services.audit_service import log_audit
from laundry_erp.services.cash_advance_service import cash_advance_total
from laundry_erp.services.commission_service import (
    commissions_for_period,
    production_totals_for_period,
    rate_table,
    total_commission,
)
from laundry_erp.utils.timezone import month_boundaries_utc

logger = logging.getLogger(__name__)

Fields = Union[PayrollFields, Mapping[str, Any]]
Number = Union[int, float]

INCOME_FIELDS = (
    "base_salary",
    "meal_allowance",
    "transport_allowance",
    "position_allowance",
    "holiday_bonus",
    "commission_total",
)
DEDUCTION_FIELDS = ("late_penalty", "other_penalty", "cash_advance")


def _get(fields: Fields, name: str) -> Any:
    if isinstance(fields, Mapping):
        return fields.get(name)
    return getattr(fields, name, None)


def _amount(fields: Fields, name: str) -> Decimal:
    value = _get(fields, name)
    if value is None or isinstance(value, bool):
        return Decimal(0)
    try:
        return Decimal(str(value))
    except ArithmeticError:
        return Decimal(0)


def _number(value: Decimal) -> Number:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def resolve_rate(rate: Optional[Any], default: int) -> Any:
    """Only an absent rate falls back to the default; an explicit 0 stays 0."""
    return default if rate is None else rate


def _overtime(fields: Fields, hours_field: str, rate_field: str, default: int) -> Decimal:
    rate = resolve_rate(_get(fields, rate_field), default)
    return _amount(fields, hours_field) * Decimal(str(rate))


def _gross(fields: Fields) -> Decimal:
    income = sum((_amount(fields, name) for name in INCOME_FIELDS), Decimal(0))
    return (
        income
        + _overtime(fields, "overtime_hours", "overtime_rate", DEFAULT_LEMBUR_JAM_RATE)
        + _overtime(fields, "holiday_overtime_hours", "holiday_overtime_rate", DEFAULT_LEMBUR_LIBUR_RATE)
    )


def _deductions(fields: Fields) -> Decimal:
    return sum((_amount(fields, name) for name in DEDUCTION_FIELDS), Decimal(0))


def overtime_regular_total(fields: Fields) -> Number:
    return _number(_overtime(fields, "overtime_hours", "overtime_rate", DEFAULT_LEMBUR_JAM_RATE))


def overtime_holiday_total(fields: Fields) -> Number:
    return _number(_overtime(fields, "holiday_overtime_hours", "holiday_overtime_rate", DEFAULT_LEMBUR_LIBUR_RATE))


def gross_income(fields: Fields) -> Number:
    """Base salary, allowances, both overtime categories, THR and commission."""
    return _number(_gross(fields))


def total_deductions(fields: Fields) -> Number:
    return _number(_deductions(fields))


def net_salary(fields: Fields) -> Number:
    return _number(_gross(fields) - _deductions(fields))


def summarize(fields: Fields) -> PayrollSummary:
    return PayrollSummary(
        overtime_regular_total=overtime_regular_total(fields),
        overtime_holiday_total=overtime_holiday_total(fields),
        gross_income=gross_income(fields),
        total_deductions=total_deductions(fields),
        net_salary=net_salary(fields),
    )


def _get_employee(db: Session, employee_id: int) -> Employee:
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if employee is None:
        raise NotFound(f"Employee {employee_id} not found")
    return employee


def month_attendance(db: Session, employee_id: int, month: int, year: int) -> List[AttendanceLog]:
    """
    Attendance rows of a local calendar month, oldest first

    Clock-outs up to MAX_SHIFT_HOURS past the month end are included so the
    month's last shift keeps its clock-out.
    """
    start, end = month_boundaries_utc(month, year)
    trailing_end = end + timedelta(hours=MAX_SHIFT_HOURS)
    return (
        db.query(AttendanceLog)
        .filter(
            AttendanceLog.employee_id == employee_id,
            AttendanceLog.timestamp >= start,
            or_(
                AttendanceLog.timestamp <= end,
                and_(AttendanceLog.type == ATTENDANCE_OUT, AttendanceLog.timestamp <= trailing_end),
            ),
        )
        .order_by(AttendanceLog.timestamp)
        .all()
    )


def build_payroll_draft(
    db: Session,
    employee_id: int,
    month: int,
    year: int,
    base_salary: Optional[int] = None,
    holiday_overtime_hours: float = 0,
    holiday_overtime_rate: Optional[int] = None,
    holiday_bonus: int = 0,
    other_penalty: int = 0,
    cash_advance: Optional[int] = None,
) -> PayrollDraftOut:
    """
    Compute a payroll proposal for one employee and local calendar month

    Attendance-derived figures (meal, transport, lateness, regular overtime),
    tenure-derived allowances, commission and the month's cash advances are
    computed; the remaining figures are manual inputs. Base salary defaults to
    the employee's own and cash_advance to the kasbon ledger total.

    Raises:
        NotFound: If the employee does not exist
        InvalidDateValue: If month is not 1-12
    """
    employee = _get_employee(db, employee_id)
    records = month_attendance(db, employee_id, month, year)
    attendance = allowance_rules.summarize_attendance(records)

    tenure = allowance_rules.tenure_months(employee.join_date, month, year)
    meal_rate = allowance_rules.meal_allowance_rate(tenure)
    position = allowance_rules.position_allowance(tenure)

    commission = commissions_for_period(production_totals_for_period(db, employee_id, month, year), rate_table(db))
    if cash_advance is None:
        cash_advance = cash_advance_total(db, employee_id, month, year)

    fields = PayrollFields(
        base_salary=employee.base_salary if base_salary is None else base_salary,
        meal_allowance=attendance.attendance_days * meal_rate,
        transport_allowance=allowance_rules.transport_allowance(attendance.attendance_days),
        overtime_hours=attendance.overtime_hours,
        overtime_rate=DEFAULT_LEMBUR_JAM_RATE,
        holiday_overtime_hours=holiday_overtime_hours,
        holiday_overtime_rate=holiday_overtime_rate,
        position_allowance=position,
        holiday_bonus=holiday_bonus,
        commission_total=total_commission(commission),
        late_penalty=allowance_rules.late_penalty(attendance.late_days),
        other_penalty=other_penalty,
        cash_advance=cash_advance,
    )
    return PayrollDraftOut(
        employee_id=employee.id,
        employee_name=employee.name,
        month=month,
        year=year,
        tenure_months=tenure,
        attendance_days=attendance.attendance_days,
        late_days=attendance.late_days,
        fields=fields,
        summary=summarize(fields),
        commission=commission,
        formulas={
            "position_allowance": allowance_rules.position_allowance_formula(tenure, position),
            "meal_allowance": allowance_rules.meal_allowance_formula(attendance.attendance_days, meal_rate, tenure),
            "late_penalty": allowance_rules.late_penalty_formula(attendance.late_days),
        },
    )


def fields_from_row(row: PayrollPeriod) -> PayrollFields:
    return PayrollFields(
        base_salary=row.base_salary,
        meal_allowance=row.meal_allowance,
        transport_allowance=row.transport_allowance,
        overtime_hours=float(row.overtime_hours or 0),
        overtime_rate=row.overtime_rate,
        holiday_overtime_hours=float(row.holiday_overtime_hours or 0),
        holiday_overtime_rate=row.holiday_overtime_rate,
        position_allowance=row.position_allowance,
        holiday_bonus=row.holiday_bonus,
        commission_total=row.commission_total,
        late_penalty=row.late_penalty,
        other_penalty=row.other_penalty,
        cash_advance=row.cash_advance,
    )


def to_record_out(row: PayrollPeriod) -> PayrollRecordOut:
    fields = fields_from_row(row)
    return PayrollRecordOut(
        id=row.id,
        employee_id=row.employee_id,
        employee_name=row.employee.name if row.employee else None,
        month=row.month,
        year=row.year,
        fields=fields,
        summary=summarize(fields),
        updated_at=row.updated_at,
    )


def save_payroll(
    db: Session,
    employee_id: int,
    month: int,
    year: int,
    fields: PayrollFields,
    actor_id: int,
) -> Tuple[PayrollPeriod, bool]:
    """
    Create or overwrite the payroll of (employee, month, year)

    A second save for the same key updates the existing row. Overtime rates
    are stored resolved.

    Returns:
        (row, created)
    """
    _get_employee(db, employee_id)
    month_boundaries_utc(month, year)

    values = fields.model_dump()
    values["overtime_rate"] = resolve_rate(values["overtime_rate"], DEFAULT_LEMBUR_JAM_RATE)
    values["holiday_overtime_rate"] = resolve_rate(values["holiday_overtime_rate"], DEFAULT_LEMBUR_LIBUR_RATE)

    row = db.query(PayrollPeriod).filter(
        PayrollPeriod.employee_id == employee_id,
        PayrollPeriod.month == month,
        PayrollPeriod.year == year,
    ).first()
    created = row is None
    if created:
        row = PayrollPeriod(employee_id=employee_id, month=month, year=year)
        db.add(row)
    for key, value in values.items():
        setattr(row, key, value)
    db.flush()

    summary = summarize(fields)
    log_audit(
        db=db,
        actor_id=actor_id,
        action=ACTION_PAYROLL_SAVED,
        entity_type="payroll",
        entity_id=row.id,
        detail={
            "employee_id": employee_id,
            "month": month,
            "year": year,
            "created": created,
            "net_salary": summary.net_salary,
        },
        commit=False,
    )
    db.commit()
    db.refresh(row)

    logger.info(
        "Payroll %s for employee %s %02d/%s (net %s)",
        "created" if created else "updated", employee_id, month, year, summary.net_salary,
    )
    return row, created


def list_payroll(db: Session, month: int, year: int, employee_id: Optional[int] = None) -> List[PayrollRecordOut]:
    """
    Every employee's payroll for a period, by name

    Employees without a saved payroll are listed with zero figures and saved=False.
    """
    month_boundaries_utc(month, year)
    query = db.query(Employee, PayrollPeriod).outerjoin(
        PayrollPeriod,
        and_(
            PayrollPeriod.employee_id == Employee.id,
            PayrollPeriod.month == month,
            PayrollPeriod.year == year,
        ),
    )
    if employee_id is not None:
        query = query.filter(Employee.id == employee_id)

    records = []
    for employee, row in query.order_by(Employee.name, Employee.id).all():
        if row is not None:
            records.append(to_record_out(row))
            continue
        fields = PayrollFields()
        records.append(PayrollRecordOut(
            id=None,
            employee_id=employee.id,
            employee_name=employee.name,
            month=month,
            year=year,
            saved=False,
            fields=fields,
            summary=summarize(fields),
        ))
    return records
