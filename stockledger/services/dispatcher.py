"""Request dispatcher.

Synopsis:
Maps ``<entity>.<operation>`` action identifiers plus a parameter bag onto the
repositories and the ledger engine, and normalizes every outcome into the
``{success, data, message}`` envelope.

Glossary:
- Action: dotted identifier such as ``transaction.create``.
- Envelope: uniform response dict; callers never see raised exceptions.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from ..errors import LedgerError, NotFoundError, StoreFailure, ValidationError
from ..store import Store
from ..utils.api_responses import envelope
from .category_repository import CategoryRepository
from .inventory_ledger import LedgerEngine
from .product_repository import ProductRepository

logger = logging.getLogger(__name__)

# handler(params) -> (data, message)
Handler = Callable[[Mapping[str, Any]], Tuple[Any, Optional[str]]]


def _param(params: Mapping[str, Any], name: str) -> Any:
    value = params.get(name)
    if value is None:
        raise ValidationError(f"{name} is required")
    return value


class ActionDispatcher:
    def __init__(self, store: Store):
        self.products = ProductRepository(store)
        self.categories = CategoryRepository(store)
        self.ledger = LedgerEngine(store)
        self._registry: Dict[str, Dict[str, Handler]] = {
            'product': {
                'list': lambda p: (self.products.list_products(), None),
                'get': lambda p: (self.products.get_product(_param(p, 'id')), None),
                'create': lambda p: (self.products.create_product(p), "Product created successfully"),
                'update': lambda p: (
                    self.products.update_product(_param(p, 'id'), p.get('changes')),
                    "Product updated successfully",
                ),
                'delete': self._delete_product,
            },
            'category': {
                'list': lambda p: (self.categories.list_categories(), None),
                'get': lambda p: (self.categories.get_category(_param(p, 'id')), None),
                'create': lambda p: (self.categories.create_category(p), "Category created successfully"),
                'update': lambda p: (
                    self.categories.update_category(_param(p, 'id'), p.get('changes')),
                    "Category updated successfully",
                ),
                'delete': self._delete_category,
                'addProduct': self._add_product_to_category,
                'removeProduct': self._remove_product_from_category,
                'products': lambda p: (self.products.list_products_in_category(_param(p, 'id')), None),
            },
            'transaction': {
                'list': lambda p: (self.ledger.list_transactions(), None),
                'get': lambda p: (self.ledger.get_transaction(_param(p, 'id')), None),
                'create': self._create_transaction,
                'update': self._update_transaction,
                'byProduct': lambda p: (self.ledger.list_transactions(_param(p, 'productId')), None),
            },
        }

    @property
    def actions(self):
        return sorted(
            f"{entity}.{operation}"
            for entity, operations in self._registry.items()
            for operation in operations
        )

    def invoke(self, action: Any, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        if not isinstance(action, str) or not action.strip():
            return envelope(False, None, "Action is required")
        if params is None:
            params = {}
        if not isinstance(params, Mapping):
            return envelope(False, None, "params must be an object")

        entity, _, operation = action.strip().partition('.')
        operations = self._registry.get(entity)
        if operations is None:
            return envelope(False, None, f"Unknown entity: {entity}")
        handler = operations.get(operation)
        if handler is None:
            return envelope(False, None, f"Unknown operation: {operation}")

        try:
            data, message = handler(params)
        except StoreFailure as exc:
            logger.error("Store failure while handling %s: %s", action, exc)
            return envelope(False, None, f"Failed to process {action}: inventory store unavailable")
        except LedgerError as exc:
            logger.warning("Rejected %s (%s): %s", action, exc.code, exc.message)
            return envelope(False, None, exc.message)
        except Exception:
            logger.exception("Unexpected error while handling %s", action)
            return envelope(False, None, f"Error processing request {action}")
        return envelope(True, data, message)

    def _create_transaction(self, params):
        entry = self.ledger.record_transaction(
            _param(params, 'product_id'),
            _param(params, 'quantity'),
            _param(params, 'transaction_type'),
            params.get('notes'),
        )
        return entry, "Inventory transaction created successfully"

    def _delete_product(self, params):
        product_id = _param(params, 'id')
        if not self.products.delete_product(product_id):
            raise NotFoundError('Product', product_id)
        return None, "Product deleted successfully"

    def _delete_category(self, params):
        category_id = _param(params, 'id')
        if not self.categories.delete_category(category_id):
            raise NotFoundError('Category', category_id)
        return None, "Category deleted successfully"

    def _add_product_to_category(self, params):
        self.categories.add_product(_param(params, 'categoryId'), _param(params, 'productId'))
        return None, "Product added to category successfully"

    def _remove_product_from_category(self, params):
        category_id = _param(params, 'categoryId')
        if not self.categories.remove_product(category_id, _param(params, 'productId')):
            raise NotFoundError('Category', category_id, "Product was not in the specified category")
        return None, "Product removed from category successfully"

    def _update_transaction(self, params):
        changes = params.get('changes')
        if changes is None:
            # flat form: {id, notes}
            changes = {key: value for key, value in params.items() if key != 'id'}
        entry = self.ledger.update_transaction(_param(params, 'id'), changes)
        return entry, "Transaction updated successfully"

    def context_snapshot(self, recent: int = 10) -> Dict[str, Any]:
        """Products, categories and the latest ledger entries, read through the action table."""
        context = {}
        for key, action in (
            ('products', 'product.list'),
            ('categories', 'category.list'),
            ('recent_transactions', 'transaction.list'),
        ):
            result = self.invoke(action, {})
            if not result['success']:
                raise StoreFailure(result['message'])
            context[key] = result['data']
        context['recent_transactions'] = context['recent_transactions'][:recent]
        return context
