from __future__ import annotations

from datetime import date
from typing import Any, Optional

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date


def require_non_empty(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_int_in_range(value: Any, field_name: str, *, minimum: int, maximum: int) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a whole number")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{field_name} must be a whole number")
    if number < minimum or number > maximum:
        raise ValidationError(f"{field_name} must be between {minimum} and {maximum}")
    return number


def optional_date(value: Optional[str], field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    try:
        return parse_iso_date(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date")


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in {"1", "true", "yes", "on"}
