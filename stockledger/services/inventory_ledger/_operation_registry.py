"""
Transaction Type Registry

Single source of truth for the supported ledger movement kinds and how each
one turns a caller-entered magnitude into a signed quantity effect.
"""

from typing import Any, Callable, Dict

from ...errors import ValidationError
from ..validators import coerce_int


def _additive(magnitude: int) -> int:
    return magnitude


def _deductive(magnitude: int) -> int:
    # Callers sometimes send shipments as negative numbers; never double-negate.
    return -abs(magnitude)


def _signed_as_given(magnitude: int) -> int:
    return magnitude


TRANSACTION_REGISTRY: Dict[str, Dict[str, Any]] = {
    'receiving': {
        'direction': 'additive',
        'effect': _additive,
        'description': 'Stock received into inventory',
    },
    'shipping': {
        'direction': 'deductive',
        'effect': _deductive,
        'description': 'Stock shipped out of inventory',
    },
    'adjustment': {
        'direction': 'signed',
        'effect': _signed_as_given,
        'description': 'Manual correction; the sign of the quantity is authoritative',
    },
}


def get_all_transaction_types() -> list:
    """Get all supported transaction types"""
    return list(TRANSACTION_REGISTRY.keys())


def validate_transaction_type(kind: Any) -> str:
    if not isinstance(kind, str) or kind not in TRANSACTION_REGISTRY:
        raise ValidationError(
            f"transaction_type must be one of: {', '.join(get_all_transaction_types())}"
        )
    return kind


def get_effect_function(kind: str) -> Callable[[int], int]:
    return TRANSACTION_REGISTRY[validate_transaction_type(kind)]['effect']


def signed_effect(kind: str, magnitude) -> int:
    """Signed change to on-hand quantity for a movement of ``kind``.

    >>> signed_effect('receiving', 5), signed_effect('shipping', -5), signed_effect('adjustment', -2)
    (5, -5, -2)
    """
    return get_effect_function(kind)(coerce_int(magnitude, 'quantity'))
