"""
Pytest configuration and shared fixtures for stockledger tests.
"""
import os
import tempfile

import pytest

from stockledger import create_app
from stockledger.extensions import db
from stockledger.services.category_repository import CategoryRepository
from stockledger.services.inventory_ledger import LedgerEngine
from stockledger.services.product_repository import ProductRepository
from stockledger.store import Store


@pytest.fixture(scope='function')
def app():
    """Create and configure a new app instance for each test."""
    # Create a temporary file to use as the database
    db_fd, db_path = tempfile.mkstemp(suffix='.db')

    app = create_app({
        'TESTING': True,
        'DATABASE_URL': f'sqlite:///{db_path}',
        'SECRET_KEY': 'test-secret-key',
        'RATELIMIT_ENABLED': False,
        'LOG_LEVEL': 'DEBUG',
    })

    with app.app_context():
        db.create_all()

    yield app

    # Clean up database
    with app.app_context():
        db.drop_all()
    Store.from_app(app).close()

    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """A test runner for the app's Click commands."""
    return app.test_cli_runner()


@pytest.fixture
def store(app):
    return Store.from_app(app)


@pytest.fixture
def products(store):
    return ProductRepository(store)


@pytest.fixture
def categories(store):
    return CategoryRepository(store)


@pytest.fixture
def ledger(store):
    return LedgerEngine(store)


@pytest.fixture
def dispatcher(app):
    return app.extensions['stockledger.dispatcher']


@pytest.fixture
def widget(products):
    """A product with five units on hand."""
    return products.create_product({
        'name': 'Widget',
        'sku': 'WID-001',
        'price': '9.99',
        'description': 'Standard widget',
        'quantity': 5,
    })
