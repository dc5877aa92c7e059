from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..core.exceptions import ValidationError

CENT = Decimal("0.01")


def to_decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"{field_name} is not a number: {value!r}") from e


def require_non_negative(value: Optional[Any], field_name: str) -> Decimal:
    if value is None:
        raise ValidationError(f"{field_name} is required")
    number = to_decimal(value, field_name)
    if number < 0:
        raise ValidationError(f"{field_name} must be non-negative")
    return number


def require_rate(value: Optional[Any], field_name: str) -> Decimal:
    """Pay rates must be present and strictly positive."""
    number = require_non_negative(value, field_name)
    if number == 0:
        raise ValidationError(f"{field_name} must be greater than zero")
    return number
