from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from sqlalchemy import delete, insert, select

from ..errors import NotFoundError, ValidationError
from ..models import Category, Product, product_categories
from ..store import Store
from .patch import Patch
from .validators import coerce_id, require_text

logger = logging.getLogger(__name__)

_COERCERS = {
    'name': lambda value: require_text(value, 'name', 100),
}


class CategoryRepository:
    """CRUD for categories and the product/category link table."""

    def __init__(self, store: Store):
        self.store = store

    def list_categories(self) -> List[Dict[str, Any]]:
        with self.store.session() as session:
            rows = session.scalars(select(Category).order_by(Category.name, Category.id)).all()
            return [row.to_dict() for row in rows]

    def get_category(self, category_id) -> Dict[str, Any]:
        category_id = coerce_id(category_id)
        with self.store.session() as session:
            category = session.get(Category, category_id)
            if category is None:
                raise NotFoundError('Category', category_id)
            return category.to_dict()

    def create_category(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        if not isinstance(fields, Mapping):
            raise ValidationError("category fields must be an object")
        category = Category(name=_COERCERS['name'](fields.get('name')))
        with self.store.unit_of_work() as session:
            session.add(category)
            session.flush()
            logger.info("Created category %s (%s)", category.id, category.name)
            return category.to_dict()

    def update_category(self, category_id, changes: Mapping[str, Any] | None) -> Dict[str, Any]:
        category_id = coerce_id(category_id)
        patch = Patch.from_changes(changes, allowed=('name',), coercers=_COERCERS)
        with self.store.unit_of_work() as session:
            category = session.get(Category, category_id)
            if category is None:
                raise NotFoundError('Category', category_id)
            if patch:
                session.execute(patch.statement(Category, category_id))
                category = session.get(Category, category_id, populate_existing=True)
            return category.to_dict()

    def delete_category(self, category_id) -> bool:
        category_id = coerce_id(category_id)
        with self.store.unit_of_work() as session:
            result = session.execute(delete(Category).where(Category.id == category_id))
            return result.rowcount > 0

    def add_product(self, category_id, product_id) -> bool:
        """Link a product to a category; linking an existing pair is a no-op."""
        category_id = coerce_id(category_id, 'categoryId')
        product_id = coerce_id(product_id, 'productId')
        with self.store.unit_of_work() as session:
            if session.get(Category, category_id) is None:
                raise NotFoundError('Category', category_id)
            if session.get(Product, product_id) is None:
                raise NotFoundError('Product', product_id)
            linked = session.execute(
                select(product_categories.c.product_id).where(
                    product_categories.c.product_id == product_id,
                    product_categories.c.category_id == category_id,
                )
            ).first()
            if linked is None:
                session.execute(
                    insert(product_categories).values(product_id=product_id, category_id=category_id)
                )
                logger.info("Linked product %s to category %s", product_id, category_id)
            return True

    def remove_product(self, category_id, product_id) -> bool:
        category_id = coerce_id(category_id, 'categoryId')
        product_id = coerce_id(product_id, 'productId')
        with self.store.unit_of_work() as session:
            result = session.execute(
                delete(product_categories).where(
                    product_categories.c.product_id == product_id,
                    product_categories.c.category_id == category_id,
                )
            )
            return result.rowcount > 0
