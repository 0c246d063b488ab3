"""Self-describing type descriptors served at ``GET /schema``."""

from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import types as sa_types

from .models import Category, InventoryTransaction, Product, TRANSACTION_TYPES

SCHEMA_NAME = "InventoryManagementSystem"
SCHEMA_VERSION = "1.0.0"

_DESCRIPTIONS = {
    Product: ("Product", "Inventory product item", {
        'id': "Unique identifier",
        'name': "Product name",
        'description': "Product description",
        'sku': "Stock keeping unit - unique product code",
        'price': "Product price (decimal string)",
        'quantity': "Available quantity in inventory",
        'created_at': "Creation timestamp",
        'updated_at': "Last update timestamp",
    }),
    Category: ("Category", "Product category classification", {
        'id': "Unique identifier",
        'name': "Category name",
        'created_at': "Creation timestamp",
    }),
    InventoryTransaction: ("InventoryTransaction", "Record of inventory movement", {
        'id': "Unique identifier",
        'product_id': "Reference to product",
        'quantity': "Quantity of items changed",
        'transaction_type': "Type of transaction",
        'notes': "Additional information",
        'created_at': "Transaction timestamp",
    }),
}


def _field_type(column) -> str:
    if isinstance(column.type, (sa_types.DateTime, sa_types.Date)):
        return "date"
    if isinstance(column.type, sa_types.Numeric) and not isinstance(column.type, sa_types.Integer):
        return "decimal"
    if isinstance(column.type, sa_types.Integer):
        return "number"
    return "string"


def describe_model(model) -> Dict[str, Any]:
    name, description, field_docs = _DESCRIPTIONS[model]
    fields = {}
    for column in sa_inspect(model).columns:
        spec = {'type': _field_type(column), 'description': field_docs.get(column.key, column.key)}
        if column.nullable and not column.primary_key:
            spec['nullable'] = True
        if model is InventoryTransaction and column.key == 'transaction_type':
            spec['enum'] = list(TRANSACTION_TYPES)
        fields[column.key] = spec
    return {'name': name, 'description': description, 'fields': fields}


def build_schema() -> Dict[str, Any]:
    return {
        'name': SCHEMA_NAME,
        'version': SCHEMA_VERSION,
        'description': "Action protocol for inventory management",
        'types': {
            descriptor['name']: descriptor
            for descriptor in (describe_model(model) for model in _DESCRIPTIONS)
        },
    }
