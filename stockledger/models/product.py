from decimal import Decimal

from ..extensions import db
from ..utils.timezone_utils import TimezoneUtils
from .mixins import TimestampMixin


class Product(TimestampMixin, db.Model):
    """Catalog product; ``quantity`` is the on-hand aggregate maintained by the ledger."""
    __tablename__ = 'products'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    sku = db.Column(db.String(50), nullable=False, unique=True)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)

    categories = db.relationship(
        'Category',
        secondary='product_categories',
        back_populates='products',
        passive_deletes=True,
    )
    transactions = db.relationship(
        'InventoryTransaction',
        back_populates='product',
        passive_deletes=True,
        lazy='dynamic',
    )

    def to_dict(self):
        price = self.price
        if price is not None and not isinstance(price, Decimal):
            price = Decimal(str(price))
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'sku': self.sku,
            'price': f"{price:.2f}" if price is not None else None,
            'quantity': self.quantity,
            'created_at': TimezoneUtils.format_for_api(self.created_at),
            'updated_at': TimezoneUtils.format_for_api(self.updated_at),
        }

    def __repr__(self):
        return f'<Product {self.id} {self.sku} qty={self.quantity}>'
