from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str, *, max_length: Optional[int] = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters")
    return value


def require_int_between(value: Any, field_name: str, low: int, high: int) -> int:
    # JSON clients may send 5.0 for 5.
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    # bool is an int subclass; "true" is not an emotion score.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} must be an integer")
    if value < low or value > high:
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return value


def optional_text(value: Any, field_name: str, *, max_length: int) -> Optional[str]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    if len(value) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters")
    return value
