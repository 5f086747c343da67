"""
Tests for the attendance annulment state machine
"""
import json
import random
from datetime import datetime, timezone

import pytest
from hypothesis import given, strategies as st

from laundry_erp.core.exceptions import AlreadyAnnulled, InvalidFormat, NotAuthorized, NotFound
from laundry_erp.models.attendance import AttendanceLog
from laundry_erp.models.audit_log import AuditLog
from laundry_erp.models.employee import Role
from laundry_erp.schemas.attendance import AnnulmentData, AttendanceRecord
from laundry_erp.services.annulment_service import (
    annul_attendance,
    apply_annulment,
    build_annulment_audit,
    can_annul,
    count_active,
    filter_active,
    is_authorized_to_annul,
    is_valid_reason,
    parse_annulment_detail,
    validate_audit_entry,
)

UTC = timezone.utc

aware_instants = st.datetimes(
    min_value=datetime(2020, 1, 1),
    max_value=datetime(2030, 12, 31),
    timezones=st.just(UTC),
)
coordinates = st.none() | st.floats(min_value=-90, max_value=90, allow_nan=False)
reasons = st.text(min_size=1).filter(lambda s: s.strip())


@st.composite
def active_records(draw):
    return AttendanceRecord(
        id=draw(st.integers(min_value=1, max_value=10**6)),
        employee_id=draw(st.integers(min_value=1, max_value=10**4)),
        type=draw(st.sampled_from(["in", "out"])),
        timestamp=draw(aware_instants),
        lat=draw(coordinates),
        lng=draw(coordinates),
    )


@given(record=active_records(), admin_id=st.integers(min_value=1), reason=reasons, at=aware_instants)
def test_apply_annulment_preserves_identity(record, admin_id, reason, at):
    annulled = apply_annulment(record, AnnulmentData(admin_id=admin_id, reason=reason, annulled_at=at))

    for field in ("id", "employee_id", "type", "timestamp", "lat", "lng"):
        assert getattr(annulled, field) == getattr(record, field)
    assert annulled.status == "annulled"
    assert annulled.annulled_by == admin_id
    assert annulled.annulled_at == at
    assert annulled.annulled_reason == reason.strip()
    assert record.status == "active"
    assert can_annul(record) is True
    assert can_annul(annulled) is False


@pytest.mark.parametrize("reason", ["", "   ", "\t\n", None, 0, 42, 1.5, {}, [], ["x"], True])
def test_invalid_reasons(reason):
    assert is_valid_reason(reason) is False


@pytest.mark.parametrize("reason", ["x", "  salah input  ", "\tdouble clock-in"])
def test_valid_reasons(reason):
    assert is_valid_reason(reason) is True


@given(text=st.text())
def test_reason_validity_depends_on_non_whitespace(text):
    assert is_valid_reason(text) == bool(text.strip())


@given(
    statuses=st.lists(st.sampled_from(["active", "annulled"]), max_size=40),
    seed=st.integers(),
)
def test_count_active_ignores_order(statuses, seed):
    records = [
        AttendanceRecord(id=i + 1, employee_id=1, type="in", timestamp=datetime(2025, 1, 1, tzinfo=UTC), status=s)
        for i, s in enumerate(statuses)
    ]
    shuffled = list(records)
    random.Random(seed).shuffle(shuffled)

    expected = statuses.count("active")
    assert count_active(records) == expected
    assert count_active(shuffled) == expected
    assert all(r.status == "active" for r in filter_active(shuffled))


def test_authorization_allow_list():
    assert is_authorized_to_annul("admin") is True
    assert is_authorized_to_annul(Role.ADMIN) is True
    for role in ("gudang", "produksi", "kurir", "ADMIN", "Admin", "", "superuser", None, 1):
        assert is_authorized_to_annul(role) is False


ORIGINAL = {
    "employee_id": 7,
    "type": "in",
    "timestamp": "2025-03-03T23:20:00.000Z",
    "lat": -8.65,
    "lng": 115.21,
}


@given(
    admin_id=st.integers(min_value=1, max_value=10**6),
    attendance_id=st.integers(min_value=1, max_value=10**6),
    reason=reasons,
    at=aware_instants,
)
def test_audit_round_trip(admin_id, attendance_id, reason, at):
    entry = build_annulment_audit(admin_id, attendance_id, reason, at, ORIGINAL)
    detail = parse_annulment_detail(entry.detail)

    assert entry.action == "ATTENDANCE_ANNULLED"
    assert entry.actor_id == admin_id
    assert detail["attendance_id"] == attendance_id
    assert detail["admin_id"] == admin_id
    assert detail["reason"] == reason.strip()
    assert datetime.fromisoformat(detail["annulled_at"].replace("Z", "+00:00")) == at.replace(
        microsecond=at.microsecond // 1000 * 1000
    )
    assert detail["original_data"] == ORIGINAL
    assert validate_audit_entry(entry, attendance_id, admin_id, reason) is True


def test_audit_keeps_string_instant_verbatim():
    entry = build_annulment_audit(1, 2, " typo ", "2025-03-04T01:00:00.000Z", ORIGINAL)
    assert parse_annulment_detail(entry.detail)["annulled_at"] == "2025-03-04T01:00:00.000Z"


def _detail(**overrides):
    detail = {
        "attendance_id": 1,
        "admin_id": 2,
        "reason": "typo",
        "annulled_at": "2025-03-04T01:00:00.000Z",
        "original_data": ORIGINAL,
    }
    detail.update(overrides)
    return json.dumps({k: v for k, v in detail.items() if v is not ...})


@pytest.mark.parametrize("serialized", [
    "{not json",
    "",
    "[]",
    "null",
    None,
    42,
    _detail(attendance_id="1"),
    _detail(admin_id=True),
    _detail(admin_id=None),
    _detail(reason=5),
    _detail(annulled_at=None),
    _detail(original_data=...),
    _detail(original_data=None),
])
def test_parse_annulment_detail_returns_none_on_bad_payload(serialized):
    assert parse_annulment_detail(serialized) is None


def test_validate_audit_entry_mismatches():
    entry = build_annulment_audit(2, 1, "typo", "2025-03-04T01:00:00.000Z", ORIGINAL)
    assert validate_audit_entry(entry, 1, 2, "  typo ") is True
    assert validate_audit_entry(entry, 99, 2, "typo") is False
    assert validate_audit_entry(entry, 1, 3, "typo") is False
    assert validate_audit_entry(entry, 1, 2, "other") is False
    assert validate_audit_entry(entry.model_copy(update={"action": "OTHER"}), 1, 2, "typo") is False
    assert validate_audit_entry(entry.model_copy(update={"detail": "{"}), 1, 2, "typo") is False


@pytest.fixture
def clock_in(db, make_employee):
    worker = make_employee()
    row = AttendanceLog(
        employee_id=worker.id,
        type="in",
        timestamp=datetime(2025, 3, 3, 23, 20, tzinfo=UTC),
        lat=-8.65,
        lng=115.21,
        shift="pagi",
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def test_annul_attendance_persists_and_audits(db, admin, clock_in):
    row = annul_attendance(db, clock_in.id, admin, "  double clock-in  ")

    assert row.status == "annulled"
    assert row.annulled_by == admin.id
    assert row.annulled_reason == "double clock-in"
    assert row.annulled_at is not None
    assert row.type == "in"
    assert row.shift == "pagi"

    audit = db.query(AuditLog).filter(AuditLog.action == "ATTENDANCE_ANNULLED").one()
    assert audit.entity_id == clock_in.id
    assert validate_audit_entry(audit, clock_in.id, admin.id, "double clock-in") is True
    original = parse_annulment_detail(audit.detail)["original_data"]
    assert original["employee_id"] == clock_in.employee_id
    assert original["timestamp"] == "2025-03-03T23:20:00.000Z"
    assert original["lat"] == pytest.approx(-8.65)


def test_annul_attendance_twice_is_rejected(db, admin, clock_in):
    annul_attendance(db, clock_in.id, admin, "typo")
    with pytest.raises(AlreadyAnnulled):
        annul_attendance(db, clock_in.id, admin, "again")
    assert db.query(AuditLog).filter(AuditLog.action == "ATTENDANCE_ANNULLED").count() == 1


def test_annul_attendance_guards(db, admin, make_employee, clock_in):
    kurir = make_employee(role=Role.KURIR)
    with pytest.raises(NotAuthorized):
        annul_attendance(db, clock_in.id, kurir, "typo")
    with pytest.raises(InvalidFormat):
        annul_attendance(db, clock_in.id, admin, "   ")
    with pytest.raises(NotFound):
        annul_attendance(db, 9999, admin, "typo")
    db.refresh(clock_in)
    assert clock_in.status == "active"
