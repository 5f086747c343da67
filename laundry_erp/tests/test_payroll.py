"""
Tests for the payroll aggregator and payroll persistence
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from laundry_erp.core.exceptions import InvalidDateValue, NotFound
from laundry_erp.models.attendance import AttendanceLog
from laundry_erp.models.audit_log import AuditLog
from laundry_erp.models.cash_advance import CashAdvance
from laundry_erp.models.commission import CommissionRate
from laundry_erp.models.payroll import PayrollPeriod
from laundry_erp.models.production import ProductionEntry
from laundry_erp.schemas.payroll import PayrollFields
from laundry_erp.services.payroll_service import (
    build_payroll_draft,
    gross_income,
    list_payroll,
    net_salary,
    overtime_holiday_total,
    overtime_regular_total,
    save_payroll,
    summarize,
    total_deductions,
)

UTC = timezone.utc
WITA = timezone(timedelta(hours=8))


def wita(y, m, d, hh, mm):
    return datetime(y, m, d, hh, mm, tzinfo=WITA).astimezone(UTC)


def test_net_salary_may_go_negative():
    fields = PayrollFields(base_salary=100000, cash_advance=500000)
    assert gross_income(fields) == 100000
    assert total_deductions(fields) == 500000
    assert net_salary(fields) == -400000


def test_gross_income_sums_every_income_field():
    fields = PayrollFields(
        base_salary=1500000,
        meal_allowance=400000,
        transport_allowance=200000,
        overtime_hours=4,
        overtime_rate=7000,
        holiday_overtime_hours=2,
        holiday_overtime_rate=35000,
        position_allowance=150000,
        holiday_bonus=1000000,
        commission_total=12500,
    )
    assert overtime_regular_total(fields) == 28000
    assert overtime_holiday_total(fields) == 70000
    assert gross_income(fields) == 1500000 + 400000 + 200000 + 28000 + 70000 + 150000 + 1000000 + 12500


def test_deductions():
    fields = PayrollFields(late_penalty=50000, other_penalty=10000, cash_advance=200000)
    assert total_deductions(fields) == 260000


def test_absent_overtime_rates_use_defaults():
    fields = PayrollFields(overtime_hours=2, holiday_overtime_hours=1)
    assert overtime_regular_total(fields) == 14000
    assert overtime_holiday_total(fields) == 35000


def test_explicit_zero_overtime_rate_is_kept():
    fields = PayrollFields(overtime_hours=2, overtime_rate=0, holiday_overtime_hours=1, holiday_overtime_rate=0)
    assert overtime_regular_total(fields) == 0
    assert overtime_holiday_total(fields) == 0


def test_fractional_holiday_overtime():
    assert overtime_holiday_total(PayrollFields(holiday_overtime_hours=2.5)) == 87500


def test_plain_mapping_with_missing_and_none_fields():
    fields = {"base_salary": 1000000, "meal_allowance": None, "cash_advance": 100000, "overtime_hours": 3}
    assert gross_income(fields) == 1021000
    assert net_salary(fields) == 921000
    assert gross_income({}) == 0
    assert net_salary({}) == 0


def test_summarize_bundles_totals():
    summary = summarize(PayrollFields(base_salary=100000, overtime_hours=3, late_penalty=25000))
    assert summary.overtime_regular_total == 21000
    assert summary.overtime_holiday_total == 0
    assert summary.gross_income == 121000
    assert summary.total_deductions == 25000
    assert summary.net_salary == 96000


@pytest.fixture
def march_worker(db, make_employee):
    """Produksi employee with two attended days, one late, in March 2025 (WITA)"""
    worker = make_employee(join_date=date(2024, 1, 15), base_salary=1500000, name="Siti")
    events = [
        ("in", wita(2025, 3, 3, 7, 20), "pagi", "active"),
        ("out", wita(2025, 3, 3, 19, 30), None, "active"),
        ("in", wita(2025, 3, 4, 6, 55), "pagi", "active"),
        ("out", wita(2025, 3, 4, 15, 0), None, "active"),
        ("in", wita(2025, 3, 5, 8, 0), "pagi", "annulled"),
        # February and April do not belong to March
        ("in", wita(2025, 2, 28, 7, 0), "pagi", "active"),
        ("in", wita(2025, 4, 1, 7, 0), "pagi", "active"),
    ]
    for type_, ts, shift, status_ in events:
        db.add(AttendanceLog(employee_id=worker.id, type=type_, timestamp=ts, shift=shift, status=status_))
    db.add(ProductionEntry(
        employee_id=worker.id, customer_name="Budi", nota_number="N-001", process="cuci",
        weight=10.5, qty=3, timestamp=wita(2025, 3, 10, 9, 0),
    ))
    db.query(CommissionRate).filter(CommissionRate.process == "cuci").update({CommissionRate.rate_per_kg: 1000})
    db.commit()
    return worker


def test_build_payroll_draft(db, march_worker):
    draft = build_payroll_draft(db, march_worker.id, 3, 2025)

    assert draft.employee_name == "Siti"
    assert draft.tenure_months == 14
    assert draft.attendance_days == 2
    assert draft.late_days == 1

    fields = draft.fields
    assert fields.base_salary == 1500000
    assert fields.meal_allowance == 40000
    assert fields.transport_allowance == 20000
    assert fields.overtime_hours == 4
    assert fields.position_allowance == 150000
    assert fields.commission_total == 10500
    assert fields.late_penalty == 25000

    assert draft.summary.overtime_regular_total == 28000
    assert draft.summary.gross_income == 1500000 + 40000 + 20000 + 28000 + 150000 + 10500
    assert draft.summary.net_salary == draft.summary.gross_income - 25000
    assert draft.formulas["late_penalty"] == "1 hari terlambat x Rp 25.000"
    assert [c.process for c in draft.commission] == ["cuci"]


def test_build_payroll_draft_manual_inputs(db, march_worker):
    draft = build_payroll_draft(
        db, march_worker.id, 3, 2025,
        base_salary=2000000, holiday_overtime_hours=2, holiday_bonus=500000, cash_advance=3000000,
    )
    assert draft.fields.base_salary == 2000000
    assert draft.summary.overtime_holiday_total == 70000
    assert draft.summary.total_deductions == 25000 + 3000000
    assert draft.summary.net_salary < 0


def test_build_payroll_draft_errors(db, march_worker):
    with pytest.raises(NotFound):
        build_payroll_draft(db, 9999, 3, 2025)
    with pytest.raises(InvalidDateValue):
        build_payroll_draft(db, march_worker.id, 13, 2025)


def test_save_payroll_is_idempotent_per_period(db, admin, march_worker):
    first, created = save_payroll(db, march_worker.id, 3, 2025, PayrollFields(base_salary=1500000), actor_id=admin.id)
    assert created is True
    assert first.overtime_rate == 7000
    assert first.holiday_overtime_rate == 35000

    second, created = save_payroll(
        db, march_worker.id, 3, 2025, PayrollFields(base_salary=1600000, overtime_rate=0), actor_id=admin.id
    )
    assert created is False
    assert second.id == first.id
    assert second.overtime_rate == 0

    rows = db.query(PayrollPeriod).filter(PayrollPeriod.employee_id == march_worker.id).all()
    assert len(rows) == 1
    assert rows[0].base_salary == 1600000
    assert db.query(AuditLog).filter(AuditLog.action == "PAYROLL_SAVED").count() == 2


def test_list_payroll_includes_unsaved_employees(db, admin, march_worker, make_employee):
    other = make_employee(name="Andi")
    save_payroll(db, march_worker.id, 3, 2025, PayrollFields(base_salary=100000, cash_advance=500000), actor_id=admin.id)
    save_payroll(db, other.id, 4, 2025, PayrollFields(base_salary=300000), actor_id=admin.id)

    records = list_payroll(db, 3, 2025)
    assert [r.employee_name for r in records] == ["Admin", "Andi", "Siti"]
    by_name = {r.employee_name: r for r in records}
    assert by_name["Siti"].saved is True
    assert by_name["Siti"].summary.net_salary == -400000
    assert by_name["Andi"].saved is False
    assert by_name["Andi"].id is None
    assert by_name["Andi"].summary.net_salary == 0

    only_other = list_payroll(db, 4, 2025, employee_id=other.id)
    assert len(only_other) == 1
    assert only_other[0].saved is True
    assert only_other[0].fields.base_salary == 300000


def test_fractional_overtime_is_not_rounded():
    fields = PayrollFields(overtime_hours=0.25, overtime_rate=7001)
    assert overtime_regular_total(fields) == 1750.25
    assert gross_income(fields) == 1750.25
    assert summarize(fields).net_salary == 1750.25


def test_draft_keeps_clock_out_after_month_end(db, make_employee):
    worker = make_employee(name="Rina")
    db.add(AttendanceLog(employee_id=worker.id, type="in", timestamp=wita(2025, 3, 31, 14, 0), shift="sore"))
    db.add(AttendanceLog(employee_id=worker.id, type="out", timestamp=wita(2025, 4, 1, 2, 0)))
    # April's own shift is not part of March
    db.add(AttendanceLog(employee_id=worker.id, type="in", timestamp=wita(2025, 4, 1, 14, 0), shift="sore"))
    db.commit()

    draft = build_payroll_draft(db, worker.id, 3, 2025)
    assert draft.attendance_days == 1
    assert draft.fields.overtime_hours == 4
    assert draft.summary.overtime_regular_total == 28000

    april = build_payroll_draft(db, worker.id, 4, 2025)
    assert april.attendance_days == 1
    assert april.fields.overtime_hours == 0


def test_draft_deducts_month_cash_advances(db, admin, march_worker):
    db.add(CashAdvance(employee_id=march_worker.id, amount=200000, created_at=wita(2025, 3, 1, 0, 30)))
    db.add(CashAdvance(employee_id=march_worker.id, amount=50000, created_at=wita(2025, 3, 31, 23, 0)))
    # 00:10 WITA on April 1 is still March 31 in UTC
    db.add(CashAdvance(employee_id=march_worker.id, amount=999000, created_at=wita(2025, 4, 1, 0, 10)))
    db.commit()

    draft = build_payroll_draft(db, march_worker.id, 3, 2025)
    assert draft.fields.cash_advance == 250000
    assert draft.summary.total_deductions == 25000 + 250000

    manual = build_payroll_draft(db, march_worker.id, 3, 2025, cash_advance=0)
    assert manual.fields.cash_advance == 0
