"""Input coercion shared by the repositories, the ledger and the dispatcher.

Every helper raises ``ValidationError`` before any store access is attempted.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..errors import ValidationError

PRICE_QUANT = Decimal("0.01")
MAX_PRICE = Decimal("99999999.99")
# ASCII only; str.isdigit() also admits superscripts that int() refuses.
_INT_TEXT = re.compile(r"-?[0-9]+")


def _int_from_text(value: str) -> Optional[int]:
    stripped = value.strip()
    if _INT_TEXT.fullmatch(stripped):
        return int(stripped)
    return None


def coerce_id(value: Any, field: str = "id") -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str) and _int_from_text(value) is not None:
        result = _int_from_text(value)
    else:
        raise ValidationError(f"{field} must be an integer")
    if result <= 0:
        raise ValidationError(f"{field} must be a positive integer")
    return result


def coerce_int(value: Any, field: str) -> int:
    """Strict integer: booleans and fractional numbers are refused."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        parsed = _int_from_text(value)
        if parsed is not None:
            return parsed
    raise ValidationError(f"{field} must be an integer")


def require_text(value: Any, field: str, max_length: int) -> str:
    """Non-blank text, stored exactly as given."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    if len(value) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return value


def optional_text(value: Any, field: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    return value


def coerce_price(value: Any, field: str = "price") -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number")
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number") from None
    if not price.is_finite():
        raise ValidationError(f"{field} must be a number")
    if price < 0:
        raise ValidationError(f"{field} cannot be negative")
    # quantize() itself fails once the result needs more than 28 digits
    if price > MAX_PRICE:
        raise ValidationError(f"{field} exceeds the maximum of {MAX_PRICE}")
    price = price.quantize(PRICE_QUANT)
    if price > MAX_PRICE:
        raise ValidationError(f"{field} exceeds the maximum of {MAX_PRICE}")
    return price
