"""
Tests for the local-calendar boundary helpers
"""
from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, strategies as st

from laundry_erp.core.exceptions import InvalidDateValue, InvalidFormat
from laundry_erp.utils.timezone import (
    current_month_local,
    day_boundaries_utc,
    ensure_utc,
    is_valid_instant,
    is_within_local_date,
    iso_8601_utc,
    iso_local,
    local_date_of,
    local_from_utc,
    month_boundaries_utc,
    parse_instant,
    today_local,
    utc_from_local,
)

UTC = timezone.utc
PLUS_7 = timedelta(hours=7)
PLUS_8 = timedelta(hours=8)

instants = st.datetimes(
    min_value=datetime(1900, 1, 1),
    max_value=datetime(2200, 1, 1),
    timezones=st.just(UTC),
)


@given(instant=instants)
def test_round_trip_is_exact(instant):
    assert utc_from_local(local_from_utc(instant)) == instant
    assert utc_from_local(local_from_utc(instant, PLUS_7), PLUS_7).microsecond == instant.microsecond


@given(instant=instants, hours=st.integers(min_value=-12, max_value=14))
def test_local_wall_clock_is_utc_plus_offset(instant, hours):
    offset = timedelta(hours=hours)
    local = local_from_utc(instant, offset)
    assert local.utcoffset() == offset
    assert local.replace(tzinfo=None) == instant.replace(tzinfo=None) + offset


def test_utc_from_local_reads_naive_as_local():
    assert utc_from_local(datetime(2025, 1, 2, 0, 0), PLUS_7) == datetime(2025, 1, 1, 17, 0, tzinfo=UTC)


def test_day_boundaries_at_plus_7():
    start, end = day_boundaries_utc("2025-01-02", offset=PLUS_7)
    assert iso_8601_utc(start) == "2025-01-01T17:00:00.000Z"
    assert iso_8601_utc(end) == "2025-01-02T16:59:59.000Z"


def test_day_boundaries_default_offset_is_wita():
    start, end = day_boundaries_utc("2025-01-02", offset=PLUS_8)
    assert start == datetime(2025, 1, 1, 16, 0, tzinfo=UTC)
    assert end == datetime(2025, 1, 2, 15, 59, 59, tzinfo=UTC)


def test_is_within_local_date_boundaries_inclusive():
    assert is_within_local_date("2025-01-02T16:59:59Z", "2025-01-02", offset=PLUS_7) is True
    assert is_within_local_date("2025-01-01T17:00:00Z", "2025-01-02", offset=PLUS_7) is True
    assert is_within_local_date("2025-01-02T17:00:00Z", "2025-01-02", offset=PLUS_7) is False
    assert is_within_local_date("2025-01-02T17:00:00Z", "2025-01-03", offset=PLUS_7) is True


def test_is_within_local_date_accepts_missing_z():
    with_z = is_within_local_date("2025-01-02T16:59:59Z", "2025-01-02", offset=PLUS_7)
    without_z = is_within_local_date("2025-01-02T16:59:59", "2025-01-02", offset=PLUS_7)
    naive = is_within_local_date(datetime(2025, 1, 2, 16, 59, 59), "2025-01-02", offset=PLUS_7)
    assert with_z is without_z is naive is True


@pytest.mark.parametrize("value", ["2025-1-02", "2025/01/02", "02-01-2025", "", "abcd-ef-gh", None])
def test_day_boundaries_rejects_bad_format(value):
    with pytest.raises(InvalidFormat):
        day_boundaries_utc(value)


@pytest.mark.parametrize("value", ["2025-13-01", "2025-00-10", "2025-01-32", "2025-01-00", "2025-02-30", "2025-04-31"])
def test_day_boundaries_rejects_bad_values(value):
    with pytest.raises(InvalidDateValue):
        day_boundaries_utc(value)


def test_day_boundaries_accepts_leap_day():
    start, _ = day_boundaries_utc("2024-02-29", offset=PLUS_8)
    assert start == datetime(2024, 2, 28, 16, 0, tzinfo=UTC)


def test_month_boundaries_leap_february():
    start, end = month_boundaries_utc(2, 2024, offset=PLUS_8)
    assert start == datetime(2024, 1, 31, 16, 0, tzinfo=UTC)
    assert end == datetime(2024, 2, 29, 15, 59, 59, tzinfo=UTC)


def test_month_boundaries_common_february_and_december():
    _, feb_end = month_boundaries_utc(2, 2025, offset=PLUS_8)
    assert feb_end == datetime(2025, 2, 28, 15, 59, 59, tzinfo=UTC)
    dec_start, dec_end = month_boundaries_utc(12, 2025, offset=PLUS_7)
    assert dec_start == datetime(2025, 11, 30, 17, 0, tzinfo=UTC)
    assert dec_end == datetime(2025, 12, 31, 16, 59, 59, tzinfo=UTC)


@pytest.mark.parametrize("month", [0, 13, -1])
def test_month_boundaries_rejects_bad_month(month):
    with pytest.raises(InvalidDateValue):
        month_boundaries_utc(month, 2025)


def test_today_local_crosses_midnight_before_utc():
    now = datetime(2025, 1, 1, 17, 0, tzinfo=UTC)
    assert today_local(offset=PLUS_7, now=now) == "2025-01-02"
    assert today_local(offset=PLUS_7, now=now - timedelta(seconds=1)) == "2025-01-01"


def test_current_month_local_rolls_over():
    now = datetime(2025, 1, 31, 16, 30, tzinfo=UTC)
    assert current_month_local(offset=PLUS_8, now=now) == (2, 2025)
    assert current_month_local(offset=PLUS_7, now=now) == (1, 2025)


def test_local_date_of():
    assert local_date_of("2025-03-02T23:20:00Z", PLUS_8) == "2025-03-03"


def test_is_valid_instant_range():
    now = datetime(2025, 6, 1, tzinfo=UTC)
    assert is_valid_instant("2020-01-01T00:00:00Z", now=now) is True
    assert is_valid_instant("2019-12-31T23:59:59Z", now=now) is False
    assert is_valid_instant("2026-06-01T00:00:00Z", now=now) is True
    assert is_valid_instant("2026-06-01T00:00:01Z", now=now) is False
    assert is_valid_instant("2025-06-01T12:00:00", now=now) is True


@pytest.mark.parametrize("value", ["not a date", "", "   ", None, 12345, "2025-13-45T00:00:00Z"])
def test_is_valid_instant_never_raises(value):
    assert is_valid_instant(value) is False


def test_parse_instant_errors():
    with pytest.raises(InvalidFormat, match="non-empty string"):
        parse_instant("")
    with pytest.raises(InvalidFormat, match="Invalid ISO string format"):
        parse_instant("yesterday")


def test_parse_instant_normalizes_offsets():
    assert parse_instant("2025-01-02T07:00:00+07:00") == datetime(2025, 1, 2, 0, 0, tzinfo=UTC)
    assert parse_instant("2025-01-02T00:00:00Z").tzinfo == UTC


def test_serialization_helpers():
    naive = datetime(2025, 1, 2, 3, 4, 5, 678900)
    assert ensure_utc(naive).tzinfo == UTC
    assert iso_8601_utc(naive) == "2025-01-02T03:04:05.678Z"
    assert iso_8601_utc(None) is None
    assert iso_local(naive, PLUS_8) == "2025-01-02T11:04:05.678900+08:00"
