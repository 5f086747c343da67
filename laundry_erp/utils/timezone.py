"""
Timezone boundary helpers for the business calendar.
- Instants are stored, exchanged and compared in UTC.
- "Local" means the civil calendar at one fixed UTC offset, settings.LOCAL_UTC_OFFSET_HOURS
  (WITA, +08:00, by default). Every conversion below resolves the offset through
  local_offset(); the optional ``offset`` argument exists for callers that need another one.
- Timestamps read back from SQLite may lack the trailing 'Z'; anything without an
  explicit offset is read as UTC.
"""
import calendar
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple, Union

from laundry_erp.core.config import settings
from laundry_erp.core.exceptions import InvalidDateValue, InvalidFormat

UTC = timezone.utc
MIN_VALID_INSTANT = datetime(2020, 1, 1, tzinfo=UTC)

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

Instant = Union[datetime, str]


def local_offset() -> timedelta:
    """The configured offset of the local civil calendar."""
    return timedelta(hours=settings.LOCAL_UTC_OFFSET_HOURS)


def _local_tz(offset: Optional[timedelta] = None) -> timezone:
    return timezone(offset if offset is not None else local_offset())


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware)."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """If dt is naive, treat as UTC and return timezone-aware UTC. If already aware, convert to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_instant(value: Instant) -> datetime:
    """
    Parse an ISO-8601 timestamp (or pass through a datetime) into an aware UTC instant

    Args:
        value: ISO string with 'Z', with an explicit offset, or with no offset at all
            (read as UTC), or a datetime (naive read as UTC)

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        InvalidFormat: If value is empty, not a string/datetime, or not parseable
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str) or not value.strip():
        raise InvalidFormat("Invalid ISO string: input must be a non-empty string")

    text = value.strip()
    if text[-1] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidFormat(f"Invalid ISO string format: {value}") from None
    return ensure_utc(parsed)


def local_from_utc(instant: Instant, offset: Optional[timedelta] = None) -> datetime:
    """Express a UTC instant on the local calendar (wall clock = UTC + offset)."""
    return parse_instant(instant).astimezone(_local_tz(offset))


def utc_from_local(local_instant: datetime, offset: Optional[timedelta] = None) -> datetime:
    """
    Convert a local instant back to UTC

    A naive datetime is read as a local wall-clock time. An aware datetime is
    simply normalised to UTC, so utc_from_local(local_from_utc(x)) == x.
    """
    if local_instant.tzinfo is None:
        local_instant = local_instant.replace(tzinfo=_local_tz(offset))
    return local_instant.astimezone(UTC)


def _local_day_bounds(day: date, offset: Optional[timedelta]) -> Tuple[datetime, datetime]:
    tz = _local_tz(offset)
    start = datetime.combine(day, time(0, 0, 0), tzinfo=tz).astimezone(UTC)
    end = datetime.combine(day, time(23, 59, 59), tzinfo=tz).astimezone(UTC)
    return start, end


def parse_local_date(local_date: str) -> date:
    """
    Validate a YYYY-MM-DD business date

    Raises:
        InvalidFormat: If the string does not match YYYY-MM-DD
        InvalidDateValue: If month/day are out of range or the day does not exist in that month
    """
    if not isinstance(local_date, str) or not _DATE_PATTERN.match(local_date):
        raise InvalidFormat(f"Invalid date format: {local_date}. Expected YYYY-MM-DD")

    year, month, day = (int(part) for part in local_date.split("-"))
    if month < 1 or month > 12 or day < 1 or day > 31:
        raise InvalidDateValue(f"Invalid date values: {local_date}")
    try:
        return date(year, month, day)
    except ValueError:
        raise InvalidDateValue(f"Invalid date: {local_date}") from None


def day_boundaries_utc(local_date: str, offset: Optional[timedelta] = None) -> Tuple[datetime, datetime]:
    """
    UTC instants of local 00:00:00 and 23:59:59 for a business date

    Used for querying the database with a local date filter.

    Args:
        local_date: Date in YYYY-MM-DD format (local calendar)
        offset: Override for the configured local offset

    Returns:
        (start_utc, end_utc), both inclusive
    """
    return _local_day_bounds(parse_local_date(local_date), offset)


def month_boundaries_utc(month: int, year: int, offset: Optional[timedelta] = None) -> Tuple[datetime, datetime]:
    """
    UTC instants spanning a local calendar month, day 1 00:00:00 through the last day 23:59:59

    Raises:
        InvalidDateValue: If month is not 1-12
    """
    try:
        month = int(month)
        year = int(year)
    except (TypeError, ValueError):
        raise InvalidFormat(f"Invalid month/year: {month}/{year}") from None
    if month < 1 or month > 12:
        raise InvalidDateValue(f"Invalid month: {month}. Expected 1-12")

    last_day = calendar.monthrange(year, month)[1]
    start, _ = _local_day_bounds(date(year, month, 1), offset)
    _, end = _local_day_bounds(date(year, month, last_day), offset)
    return start, end


def is_within_local_date(instant: Instant, local_date: str, offset: Optional[timedelta] = None) -> bool:
    """True if the instant falls on the given local date (both boundaries inclusive)."""
    start, end = day_boundaries_utc(local_date, offset)
    return start <= parse_instant(instant) <= end


def local_date_of(instant: Instant, offset: Optional[timedelta] = None) -> str:
    """Local calendar date (YYYY-MM-DD) on which a UTC instant happened."""
    return local_from_utc(instant, offset).date().isoformat()


def minutes_since_local_midnight(instant: Instant, offset: Optional[timedelta] = None) -> int:
    local = local_from_utc(instant, offset)
    return local.hour * 60 + local.minute


def today_local(offset: Optional[timedelta] = None, now: Optional[datetime] = None) -> str:
    """Current date on the local calendar as YYYY-MM-DD."""
    return local_date_of(now or now_utc(), offset)


def current_month_local(offset: Optional[timedelta] = None, now: Optional[datetime] = None) -> Tuple[int, int]:
    """Current (month, year) on the local calendar. Used as the default payroll period."""
    local = local_from_utc(now or now_utc(), offset)
    return local.month, local.year


def _one_year_after(dt: datetime) -> datetime:
    try:
        return dt.replace(year=dt.year + 1)
    except ValueError:
        # Feb 29 -> Mar 1 of the following year
        return dt.replace(year=dt.year + 1, month=3, day=1)


def is_valid_instant(value: object, now: Optional[datetime] = None) -> bool:
    """
    Sanity guard for user-supplied timestamps

    Returns:
        True if value parses and lies within [2020-01-01T00:00:00Z, now + 1 year]
    """
    try:
        instant = parse_instant(value)
    except InvalidFormat:
        return False
    upper = _one_year_after(ensure_utc(now) if now else now_utc())
    return MIN_VALID_INSTANT <= instant <= upper


def iso_8601_utc(dt: Optional[Instant]) -> Optional[str]:
    """ISO-8601 with millisecond precision and 'Z', the format timestamps are stored in."""
    if dt is None:
        return None
    s = parse_instant(dt).isoformat(timespec="milliseconds")
    if s.endswith("+00:00"):
        s = s[:-6] + "Z"
    return s


def iso_local(dt: Optional[Instant], offset: Optional[timedelta] = None) -> Optional[str]:
    """Serialize with the local offset (e.g. +08:00) for API responses."""
    if dt is None:
        return None
    return local_from_utc(dt, offset).isoformat()
