from __future__ import annotations

import math
from enum import Enum
from typing import Any, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def parse_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except (TypeError, ValueError):
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}") from None


def _parse_coordinate(value: Any, field_name: str, limit: float) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number") from None
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a finite number")
    if number < -limit or number > limit:
        raise ValidationError(f"{field_name} must be between {-limit:g} and {limit:g}")
    return number


def parse_latitude(value: Any) -> float:
    return _parse_coordinate(value, "latitude", 90.0)


def parse_longitude(value: Any) -> float:
    return _parse_coordinate(value, "longitude", 180.0)
