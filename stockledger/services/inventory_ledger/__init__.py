"""
Inventory Ledger - Canonical Entry Point

All stock movements go through LedgerEngine.record_transaction, which writes
the ledger entry and the product quantity change as one unit of work.
"""

from ._core import LedgerEngine
from ._edit_logic import IMMUTABLE_FIELDS, MUTABLE_FIELDS
from ._operation_registry import (
    TRANSACTION_REGISTRY,
    get_all_transaction_types,
    signed_effect,
    validate_transaction_type,
)
from ._validation import LedgerDiscrepancy, verify_ledger

__all__ = [
    'LedgerEngine',
    'LedgerDiscrepancy',
    'signed_effect',
    'verify_ledger',
    'get_all_transaction_types',
    'validate_transaction_type',
    'TRANSACTION_REGISTRY',
    'MUTABLE_FIELDS',
    'IMMUTABLE_FIELDS',
]
