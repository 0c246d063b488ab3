"""Error taxonomy shared by the repositories, the ledger and the dispatcher.

Services raise these; only the dispatcher catches them and turns them into
response envelopes.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for every expected failure of an inventory operation."""

    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(LedgerError):
    code = "not_found"

    def __init__(self, entity: str, entity_id, message: str | None = None):
        super().__init__(message or f"{entity} with ID {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class NegativeInventoryError(LedgerError):
    code = "negative_inventory"

    def __init__(self, product_id: int, resulting_quantity: int):
        super().__init__(
            f"Transaction would cause negative inventory for product {product_id} "
            f"(resulting quantity {resulting_quantity})"
        )
        self.product_id = product_id
        self.resulting_quantity = resulting_quantity


class ImmutableFieldError(LedgerError):
    code = "immutable"

    def __init__(self, fields):
        names = ", ".join(sorted(fields))
        super().__init__(f"Committed inventory transactions cannot change: {names}")
        self.fields = tuple(sorted(fields))


class ValidationError(LedgerError):
    code = "validation"


class StoreFailure(LedgerError):
    """Unexpected row-store or connectivity failure."""

    code = "store_failure"
