from ..extensions import db
from ..utils.timezone_utils import TimezoneUtils
from .mixins import CreatedAtMixin

TRANSACTION_TYPES = ('receiving', 'shipping', 'adjustment')


class InventoryTransaction(CreatedAtMixin, db.Model):
    """Append-only ledger entry for a single stock movement.

    ``quantity`` is the magnitude as entered by the caller; the signed effect
    already applied to the product is derived from ``transaction_type``.
    """
    __tablename__ = 'inventory_transactions'

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id', ondelete='CASCADE'), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    transaction_type = db.Column(db.String(20), nullable=False)
    notes = db.Column(db.Text, nullable=True)

    product = db.relationship('Product', back_populates='transactions')

    __table_args__ = (
        db.CheckConstraint(
            "transaction_type IN ('receiving', 'shipping', 'adjustment')",
            name='ck_inventory_transactions_type',
        ),
        db.Index('idx_inventory_transactions_product_created', 'product_id', 'created_at'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'product_id': self.product_id,
            'quantity': self.quantity,
            'transaction_type': self.transaction_type,
            'notes': self.notes,
            'created_at': TimezoneUtils.format_for_api(self.created_at),
        }

    def __repr__(self):
        return f'<InventoryTransaction {self.id} | Product {self.product_id} | {self.transaction_type}: {self.quantity}>'
