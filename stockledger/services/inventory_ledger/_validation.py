import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from ...models import InventoryTransaction, Product
from ._operation_registry import signed_effect

logger = logging.getLogger(__name__)


@dataclass
class LedgerDiscrepancy:
    """A product whose ledger history cannot explain its on-hand quantity"""
    product_id: int
    sku: str
    quantity: int
    ledger_total: int
    implied_initial: int
    problems: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product_id': self.product_id,
            'sku': self.sku,
            'quantity': self.quantity,
            'ledger_total': self.ledger_total,
            'implied_initial': self.implied_initial,
            'problems': list(self.problems),
        }


def verify_ledger(store, product_id: Optional[int] = None) -> List[LedgerDiscrepancy]:
    """Replay each product's ledger and report histories that break the quantity invariant.

    The initial quantity is not stored, so it is implied as
    ``quantity - sum(effects)``; replaying from there, the running balance must
    never dip below zero.
    """
    product_stmt = select(Product).order_by(Product.id)
    entry_stmt = select(InventoryTransaction).order_by(
        InventoryTransaction.product_id, InventoryTransaction.created_at, InventoryTransaction.id
    )
    if product_id is not None:
        product_stmt = product_stmt.where(Product.id == product_id)
        entry_stmt = entry_stmt.where(InventoryTransaction.product_id == product_id)

    with store.session() as session:
        products = session.scalars(product_stmt).all()
        effects = defaultdict(list)
        for entry in session.scalars(entry_stmt):
            effects[entry.product_id].append(signed_effect(entry.transaction_type, entry.quantity))

        discrepancies = []
        for product in products:
            history = effects.get(product.id, [])
            ledger_total = sum(history)
            implied_initial = product.quantity - ledger_total
            problems = []
            if product.quantity < 0:
                problems.append('negative on-hand quantity')
            if implied_initial < 0:
                problems.append('ledger exceeds on-hand quantity')

            running = implied_initial
            for step, effect in enumerate(history, start=1):
                running += effect
                if running < 0:
                    problems.append(f'running balance negative after entry {step}')
                    break

            if problems:
                logger.error("LEDGER MISMATCH for product %s (%s): %s", product.id, product.sku, "; ".join(problems))
                discrepancies.append(LedgerDiscrepancy(
                    product_id=product.id,
                    sku=product.sku,
                    quantity=product.quantity,
                    ledger_total=ledger_total,
                    implied_initial=implied_initial,
                    problems=problems,
                ))

    return discrepancies
