"""Models package - imports all models for the application"""
from ..extensions import db

# Import in dependency order for table creation
from .product import Product
from .category import Category, product_categories
from .inventory_transaction import InventoryTransaction, TRANSACTION_TYPES

__all__ = [
    'db',
    'Product',
    'Category',
    'product_categories',
    'InventoryTransaction',
    'TRANSACTION_TYPES',
]
