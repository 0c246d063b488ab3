import logging

from ...errors import NotFoundError
from ...models import InventoryTransaction
from ..patch import Patch
from ..validators import coerce_id, optional_text

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = ('notes',)
# Already applied to the product aggregate; changing them would desync quantity.
IMMUTABLE_FIELDS = ('quantity', 'transaction_type', 'product_id')


def update_transaction_notes(store, transaction_id, changes) -> dict:
    """
    Edit a committed ledger entry.

    Only ``notes`` may change. Attempts to touch quantity, kind or product raise
    ImmutableFieldError; any other key is ignored. Corrections to stock must be
    recorded as a new compensating ``adjustment`` entry.
    """
    transaction_id = coerce_id(transaction_id)
    patch = Patch.from_changes(
        changes,
        allowed=MUTABLE_FIELDS,
        immutable=IMMUTABLE_FIELDS,
        ignore_unknown=True,
        coercers={'notes': lambda value: optional_text(value, 'notes')},
    )

    with store.unit_of_work() as session:
        entry = session.get(InventoryTransaction, transaction_id)
        if entry is None:
            raise NotFoundError('Transaction', transaction_id)
        if patch:
            session.execute(patch.statement(InventoryTransaction, transaction_id))
            entry = session.get(InventoryTransaction, transaction_id, populate_existing=True)
            logger.info("Updated notes on transaction %s", transaction_id)
        return entry.to_dict()
