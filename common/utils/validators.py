from decimal import Decimal, InvalidOperation
from typing import Any, Optional


def ensure_positive_int(value: Any, field: str, *, maximum: Optional[int] = None) -> int:
    """Coerce ``value`` to an int > 0 (and <= ``maximum``) or raise ValueError."""

    if value is None or isinstance(value, bool):
        raise ValueError(f"{field} must be > 0")
    if isinstance(value, str):
        value = value.strip()
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{field} must be a whole number") from None
    if not number.is_finite():
        raise ValueError(f"{field} must be a whole number")
    # compare before to_integral/int so huge exponents never expand
    if maximum is not None and number > maximum:
        raise ValueError(f"{field} must be at most {maximum}")
    if number != number.to_integral_value():
        raise ValueError(f"{field} must be a whole number")
    if number <= 0:
        raise ValueError(f"{field} must be > 0")
    return int(number)


def ensure_positive_decimal(value: Any, field: str, *, maximum: Optional[Decimal] = None) -> Decimal:
    if value is None or isinstance(value, bool):
        raise ValueError(f"{field} is required")
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"{field} must be a number") from None
    if not number.is_finite() or number <= 0:
        raise ValueError(f"{field} must be > 0")
    if maximum is not None and number > maximum:
        raise ValueError(f"{field} must be at most {maximum}")
    return number


def clean_text(value: Any, *, max_length: Optional[int] = None) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if max_length is not None:
        text = text[:max_length]
    return text or None
