"""
JSON serializer utility for converting Python objects to JSON-safe values
"""
import json
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from uuid import UUID
from typing import Any, Optional

from pydantic import BaseModel

from laundry_erp.utils.timezone import iso_8601_utc


def to_json_safe(value: Any) -> Any:
    """
    Recursively convert Python objects to JSON-safe values

    Datetimes become UTC ISO strings with 'Z' (naive ones are read as UTC),
    Decimals become int when integral and float otherwise.

    Args:
        value: Any Python object to convert

    Returns:
        JSON-safe equivalent of the input value
    """
    if value is None:
        return None
    elif isinstance(value, (str, int, float, bool)):
        return value
    elif isinstance(value, datetime):
        return iso_8601_utc(value)
    elif isinstance(value, (date, time)):
        return value.isoformat()
    elif isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, UUID):
        return str(value)
    elif isinstance(value, dict):
        return {k: to_json_safe(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple, set)):
        return [to_json_safe(item) for item in value]
    elif isinstance(value, BaseModel):
        return to_json_safe(value.model_dump())
    return str(value)


def sanitize_for_json(obj: Any) -> Any:
    """
    Recursively sanitize Python objects for JSON storage.
    Use before saving to any serialized column (audit_logs.detail).
    """
    return to_json_safe(obj)


def dumps_detail(detail: Optional[Any]) -> Optional[str]:
    """
    Serialize an audit detail payload to the string stored in audit_logs.detail.
    Strings are taken as already serialized.
    """
    if detail is None:
        return None
    if isinstance(detail, str):
        return detail
    return json.dumps(sanitize_for_json(detail), ensure_ascii=False)
