import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...errors import NegativeInventoryError, NotFoundError
from ...models import InventoryTransaction, Product
from ...store import Store
from ...utils.timezone_utils import TimezoneUtils
from ..validators import coerce_id, coerce_int, optional_text
from ._edit_logic import update_transaction_notes
from ._operation_registry import signed_effect, validate_transaction_type
from ._validation import verify_ledger

logger = logging.getLogger(__name__)

_products = Product.__table__


class LedgerEngine:
    """
    Canonical entry point for ALL stock movements.

    Every change to a product's on-hand quantity is recorded as an
    InventoryTransaction and applied to the product in the same unit of work.
    """

    def __init__(self, store: Store):
        self.store = store

    def record_transaction(
        self,
        product_id,
        quantity,
        transaction_type: str,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        product_id = coerce_id(product_id, 'product_id')
        kind = validate_transaction_type(transaction_type)
        magnitude = coerce_int(quantity, 'quantity')
        notes = optional_text(notes, 'notes')
        delta = signed_effect(kind, magnitude)

        with self.store.session() as session:
            if session.get(Product, product_id) is None:
                logger.warning("Ledger rejected %s for missing product %s", kind, product_id)
                raise NotFoundError('Product', product_id)

        with self.store.unit_of_work() as session:
            entry = InventoryTransaction(
                product_id=product_id,
                quantity=magnitude,
                transaction_type=kind,
                notes=notes,
            )
            session.add(entry)
            try:
                session.flush()
            except IntegrityError:
                # product removed between the existence check and the insert
                raise NotFoundError('Product', product_id) from None

            resulting_quantity = self._apply_effect(session, product_id, delta)
            if resulting_quantity is None:
                raise NotFoundError('Product', product_id)
            if resulting_quantity < 0:
                logger.warning(
                    "Ledger rejected %s of %s for product %s: quantity would become %s",
                    kind, magnitude, product_id, resulting_quantity,
                )
                raise NegativeInventoryError(product_id, resulting_quantity)

            payload = entry.to_dict()

        logger.info(
            "Recorded %s #%s for product %s: %+d -> quantity %s",
            kind, payload['id'], product_id, delta, resulting_quantity,
        )
        return payload

    @staticmethod
    def _apply_effect(session: Session, product_id: int, delta: int) -> Optional[int]:
        """Add ``delta`` to the product row in place and return the new quantity.

        The row lock taken by this UPDATE serializes concurrent movements on the
        same product, so the returned value always reflects committed history.
        """
        stmt = (
            update(_products)
            .where(_products.c.id == product_id)
            .values(quantity=_products.c.quantity + delta, updated_at=TimezoneUtils.utc_now())
            .returning(_products.c.quantity)
        )
        return session.execute(stmt).scalar_one_or_none()

    def update_transaction(self, transaction_id, changes) -> Dict[str, Any]:
        return update_transaction_notes(self.store, transaction_id, changes)

    def list_transactions(self, product_id=None) -> List[Dict[str, Any]]:
        stmt = select(InventoryTransaction).order_by(
            InventoryTransaction.created_at.desc(), InventoryTransaction.id.desc()
        )
        with self.store.session() as session:
            if product_id is not None:
                product_id = coerce_id(product_id, 'productId')
                if session.get(Product, product_id) is None:
                    raise NotFoundError('Product', product_id)
                stmt = stmt.where(InventoryTransaction.product_id == product_id)
            return [entry.to_dict() for entry in session.scalars(stmt).all()]

    def get_transaction(self, transaction_id) -> Dict[str, Any]:
        transaction_id = coerce_id(transaction_id)
        with self.store.session() as session:
            entry = session.get(InventoryTransaction, transaction_id)
            if entry is None:
                raise NotFoundError('Transaction', transaction_id)
            return entry.to_dict()

    def verify(self, product_id=None):
        if product_id is not None:
            product_id = coerce_id(product_id, 'product_id')
        return verify_ledger(self.store, product_id)
