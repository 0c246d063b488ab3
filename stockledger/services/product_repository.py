from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from sqlalchemy import delete, select

from ..errors import NotFoundError, ValidationError
from ..models import Category, Product, product_categories
from ..store import Store
from ..utils.timezone_utils import TimezoneUtils
from .patch import Patch
from .validators import coerce_id, coerce_int, coerce_price, optional_text, require_text

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('name', 'description', 'sku', 'price')
CREATE_FIELDS = EDITABLE_FIELDS + ('quantity',)

_COERCERS = {
    'name': lambda value: require_text(value, 'name', 255),
    'description': lambda value: optional_text(value, 'description'),
    'sku': lambda value: require_text(value, 'sku', 50),
    'price': coerce_price,
}


class ProductRepository:
    """Single-row CRUD for products.

    ``quantity`` is only written here once, as the initial value at creation.
    Every later change goes through the inventory ledger.
    """

    def __init__(self, store: Store):
        self.store = store

    def list_products(self) -> List[Dict[str, Any]]:
        with self.store.session() as session:
            rows = session.scalars(select(Product).order_by(Product.name, Product.id)).all()
            return [row.to_dict() for row in rows]

    def get_product(self, product_id) -> Dict[str, Any]:
        product_id = coerce_id(product_id)
        with self.store.session() as session:
            product = session.get(Product, product_id)
            if product is None:
                raise NotFoundError('Product', product_id)
            return product.to_dict()

    def create_product(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        if not isinstance(fields, Mapping):
            raise ValidationError("product fields must be an object")
        for required in ('name', 'sku', 'price'):
            if fields.get(required) is None:
                raise ValidationError(f"{required} is required")

        initial_quantity = fields.get('quantity')
        initial_quantity = 0 if initial_quantity is None else coerce_int(initial_quantity, 'quantity')
        if initial_quantity < 0:
            raise ValidationError("quantity cannot be negative")

        product = Product(
            name=_COERCERS['name'](fields['name']),
            description=_COERCERS['description'](fields.get('description')),
            sku=_COERCERS['sku'](fields['sku']),
            price=_COERCERS['price'](fields['price']),
            quantity=initial_quantity,
        )
        with self.store.unit_of_work() as session:
            session.add(product)
            session.flush()
            logger.info("Created product %s (sku=%s, initial quantity=%s)", product.id, product.sku, product.quantity)
            return product.to_dict()

    def update_product(self, product_id, changes: Mapping[str, Any] | None) -> Dict[str, Any]:
        product_id = coerce_id(product_id)
        if isinstance(changes, Mapping) and 'quantity' in changes:
            raise ValidationError("quantity can only be changed through inventory transactions")
        patch = Patch.from_changes(changes, allowed=EDITABLE_FIELDS, coercers=_COERCERS)

        with self.store.unit_of_work() as session:
            stmt = patch.statement(Product, product_id, always={'updated_at': TimezoneUtils.utc_now()})
            result = session.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError('Product', product_id)
            product = session.get(Product, product_id, populate_existing=True)
            return product.to_dict()

    def delete_product(self, product_id) -> bool:
        """Delete unconditionally; ledger rows and category links cascade in the store."""
        product_id = coerce_id(product_id)
        with self.store.unit_of_work() as session:
            result = session.execute(delete(Product).where(Product.id == product_id))
            existed = result.rowcount > 0
        if existed:
            logger.info("Deleted product %s", product_id)
        return existed

    def list_products_in_category(self, category_id) -> List[Dict[str, Any]]:
        category_id = coerce_id(category_id)
        with self.store.session() as session:
            if session.get(Category, category_id) is None:
                raise NotFoundError('Category', category_id)
            rows = session.scalars(
                select(Product)
                .join(product_categories, product_categories.c.product_id == Product.id)
                .where(product_categories.c.category_id == category_id)
                .order_by(Product.name, Product.id)
            ).all()
            return [row.to_dict() for row in rows]
